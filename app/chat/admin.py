"""
Django admin configuration for chat models.
"""

from django.contrib import admin

from chat.models import Conversation, Message, Participant


class ParticipantInline(admin.TabularInline):
    """Inline display of participants in conversation admin."""

    model = Participant
    extra = 0
    readonly_fields = ["last_read_at", "created_at"]
    raw_id_fields = ["user"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = ["id", "commission", "created_at", "last_message_at"]
    raw_id_fields = ["commission"]
    readonly_fields = ["created_at", "updated_at", "last_message_at"]
    inlines = [ParticipantInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for message moderation."""

    list_display = ["id", "conversation", "sender", "message_type", "created_at"]
    list_filter = ["message_type", "created_at"]
    search_fields = ["content"]
    raw_id_fields = ["conversation", "sender"]
    readonly_fields = ["created_at", "updated_at"]
