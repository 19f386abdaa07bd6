"""
Chat storage models.

The chat app stores the conversation between a client and an artist; delivery
to devices is handled elsewhere. Commissions link to the conversation so that
status changes can be posted into it and so that a declined request can be
purged together with its conversation.

Models:
    Conversation: Container for messages between two users
    Participant: User membership in a conversation
    Message: Individual message, either authored text or a commission event
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models

from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: User-authored text message
    COMMISSION_REQUEST: Posted when a client requests a commission
    COMMISSION_UPDATE: Posted when a commission changes status
    """

    TEXT = "text", "Text"
    COMMISSION_REQUEST = "commission_request", "Commission Request"
    COMMISSION_UPDATE = "commission_update", "Commission Update"


class Conversation(BaseModel):
    """
    A conversation between a client and an artist.

    Fields:
        commission: Commission currently discussed in this conversation.
            A reused conversation is relinked to the newest commission.
        last_message_at: Timestamp of most recent message (for sorting)
    """

    commission = models.OneToOneField(
        "commissions.Commission",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="conversation",
        help_text="Commission this conversation is about",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-last_message_at", "-created_at"]

    def __str__(self) -> str:
        return f"Conversation({self.pk})"

    def has_participant(self, user: User) -> bool:
        return self.participants.filter(user=user).exists()


class Participant(BaseModel):
    """
    Tracks user membership in a conversation.

    Constraints:
        - UniqueConstraint(conversation, user): One membership per user
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text="Conversation this participation belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="conversation_participations",
        help_text="User participating in the conversation",
    )

    last_read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time the user read messages in this conversation",
    )

    class Meta:
        db_table = "chat_participant"
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_conversation_participant",
            ),
        ]

    def __str__(self) -> str:
        return f"Participant(user={self.user_id}, conversation={self.conversation_id})"


class Message(BaseModel):
    """
    A single message in a conversation.

    Commission event messages carry structured data in ``metadata``
    (commission id, new status, and for requests the request details).
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_messages",
        help_text="User who sent the message",
    )

    message_type = models.CharField(
        max_length=30,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        db_index=True,
        help_text="Type of message (text or commission event)",
    )

    content = models.TextField(
        blank=True,
        default="",
        help_text="Message text",
    )

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Structured data for commission event messages",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["conversation", "created_at"],
                name="chat_msg_conv_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Message({self.pk}, type={self.message_type})"
