"""
Chat app storing client/artist conversations.

This app handles:
- Finding or creating the conversation between a client and an artist
- Commission request and status update messages
- Purging a declined request's conversation

Real-time delivery is out of scope; messages are plain rows.

Usage:
    from chat.services import ConversationService, MessageService
"""
