"""
Tests for chat app.

This package contains test modules for:
- test_services.py: ConversationService and MessageService tests

Usage:
    pytest chat/tests/
"""
