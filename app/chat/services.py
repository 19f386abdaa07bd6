"""
Chat service layer.

Services:
    ConversationService: Find or create the client/artist conversation,
        link it to a commission, purge it when a request is declined
    MessageService: Post authored and commission event messages

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions

Usage:
    from chat.services import ConversationService, MessageService

    result = ConversationService.find_or_create_direct(client, artist)
    if result.success:
        conversation = result.data

    MessageService.post_message(
        conversation=conversation,
        sender=client,
        content="New commission request",
        message_type=MessageType.COMMISSION_REQUEST,
        metadata={"commission_id": str(commission.id)},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import transaction

from core.services import BaseService, ServiceResult

from chat.models import Conversation, Message, MessageType, Participant

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User
    from commissions.models import Commission


class ConversationService(BaseService):
    """
    Service for conversation lifecycle operations.

    Methods:
        find_or_create_direct: Existing conversation between two users, or a new one
        link_commission: Point a conversation at a commission
        for_commission: Conversation linked to a commission, if any
        purge: Hard delete a conversation with its messages and participants
    """

    @classmethod
    def find_or_create_direct(
        cls,
        user1: User,
        user2: User,
    ) -> ServiceResult[Conversation]:
        """
        Create or retrieve the conversation between two users.

        Error codes:
            SAME_USER: Cannot create a conversation with yourself
        """
        if user1.pk == user2.pk:
            return ServiceResult.failure(
                "Cannot create a conversation with yourself",
                error_code="SAME_USER",
            )

        existing = (
            Conversation.objects.filter(participants__user=user1)
            .filter(participants__user=user2)
            .order_by("-created_at")
            .first()
        )
        if existing is not None:
            cls.get_logger().debug(
                f"Found existing conversation {existing.id} "
                f"between users {user1.pk} and {user2.pk}"
            )
            return ServiceResult.success(existing)

        with transaction.atomic():
            conversation = Conversation.objects.create()
            Participant.objects.bulk_create(
                [
                    Participant(conversation=conversation, user=user1),
                    Participant(conversation=conversation, user=user2),
                ]
            )

        cls.get_logger().info(
            f"Created conversation {conversation.id} "
            f"between users {user1.pk} and {user2.pk}"
        )
        return ServiceResult.success(conversation)

    @classmethod
    def link_commission(cls, conversation: Conversation, commission: Commission) -> None:
        """
        Link a conversation to a commission.

        A commission has at most one conversation, so any other conversation
        still pointing at it is unlinked first.
        """
        with transaction.atomic():
            Conversation.objects.filter(commission=commission).exclude(
                pk=conversation.pk
            ).update(commission=None)
            conversation.commission = commission
            conversation.save(update_fields=["commission", "updated_at"])

    @classmethod
    def for_commission(cls, commission_id) -> Conversation | None:
        return Conversation.objects.filter(commission_id=commission_id).first()

    @classmethod
    def purge(cls, conversation: Conversation) -> None:
        """
        Hard delete a conversation.

        Deletes messages, then participants, then the conversation itself.
        Callers own the surrounding transaction.
        """
        conversation_id = conversation.pk
        deleted_messages, _ = Message.objects.filter(conversation=conversation).delete()
        Participant.objects.filter(conversation=conversation).delete()
        conversation.delete()

        cls.get_logger().info(
            f"Purged conversation {conversation_id} ({deleted_messages} messages)"
        )


class MessageService(BaseService):
    """Service for posting messages."""

    @classmethod
    def post_message(
        cls,
        conversation: Conversation,
        sender: User | None,
        content: str,
        message_type: str = MessageType.TEXT,
        metadata: dict[str, Any] | None = None,
    ) -> ServiceResult[Message]:
        """
        Post a message to a conversation.

        Event messages may be posted with an empty body; authored text
        messages may not.

        Error codes:
            NOT_PARTICIPANT: Sender is not a member of the conversation
            EMPTY_CONTENT: Text message content cannot be empty
        """
        if sender is not None and not conversation.has_participant(sender):
            return ServiceResult.failure(
                "You are not a participant in this conversation",
                error_code="NOT_PARTICIPANT",
            )

        content = content.strip() if content else ""
        if message_type == MessageType.TEXT and not content:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="EMPTY_CONTENT",
            )

        with transaction.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                message_type=message_type,
                content=content,
                metadata=metadata or {},
            )
            conversation.last_message_at = message.created_at
            conversation.save(update_fields=["last_message_at", "updated_at"])

        cls.get_logger().debug(
            f"Posted {message_type} message {message.id} "
            f"to conversation {conversation.id}"
        )
        return ServiceResult.success(message)
