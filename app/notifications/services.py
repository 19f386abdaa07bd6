"""
Notification service layer.

``notify`` is the single entry point used by the commission and payment
services. It schedules the Celery delivery task after the surrounding
transaction commits, so a rolled-back operation never notifies anyone, and
it never raises: a broker outage is logged and the business operation still
succeeds.

Usage:
    from notifications.services import notify
    from notifications.models import NotificationEvent

    notify(artist.id, NotificationEvent.COMMISSION_REQUEST, {
        "commission_id": str(commission.id),
    })
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction

from core.services import BaseService, ServiceResult

from notifications.models import Notification, NotificationEvent

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


TITLES = {
    NotificationEvent.COMMISSION_REQUEST: "New commission request",
    NotificationEvent.COMMISSION_ACCEPTED: "Your commission was accepted",
    NotificationEvent.COMMISSION_DECLINED: "Your commission request was declined",
    NotificationEvent.COMMISSION_COMPLETED: "Your commission is complete",
    NotificationEvent.COMMISSION_CANCELLED: "A commission was cancelled",
    NotificationEvent.MILESTONE_PLAN_CONFIRMED: "Milestone plan confirmed",
    NotificationEvent.MILESTONE_APPROVAL_NEEDED: "A milestone needs your approval",
    NotificationEvent.REVISION_REQUESTED: "Revision requested",
    NotificationEvent.PAYMENT_RECEIVED: "Payment received",
    NotificationEvent.PAYMENT_FAILED: "Payment failed",
    NotificationEvent.PAYMENT_REFUNDED: "Payment refunded",
    NotificationEvent.ESCROW_RELEASED: "Funds released",
}


class NotificationService(BaseService):
    """
    Service for creating notification records.

    Methods:
        create_notification: Render and store a notification (called by the task)
    """

    @classmethod
    def create_notification(
        cls,
        recipient_id,
        event_type: str,
        payload: dict[str, Any] | None = None,
    ) -> ServiceResult[Notification]:
        """
        Render and store a notification.

        Error codes:
            UNKNOWN_EVENT: event_type is not a NotificationEvent
        """
        payload = payload or {}
        if event_type not in NotificationEvent.values:
            return ServiceResult.failure(
                f"Unknown notification event: {event_type}",
                error_code="UNKNOWN_EVENT",
            )

        notification = Notification.objects.create(
            recipient_id=recipient_id,
            event_type=event_type,
            title=TITLES[NotificationEvent(event_type)],
            body=payload.get("message", ""),
            data=payload,
        )

        cls.get_logger().debug(
            f"Created {event_type} notification {notification.id} for user {recipient_id}"
        )
        return ServiceResult.success(notification)


def notify(user_id, event_type: str, payload: dict[str, Any] | None = None) -> None:
    """
    Fire-and-forget notification.

    Queues delivery once the current transaction commits (immediately when
    called outside a transaction). Failures to queue are logged, never raised.
    """
    from notifications.tasks import deliver_notification

    def _send():
        try:
            deliver_notification.delay(str(user_id), str(event_type), payload or {})
        except Exception:
            logger.warning(
                "Failed to queue notification",
                extra={"user_id": str(user_id), "event_type": str(event_type)},
                exc_info=True,
            )

    transaction.on_commit(_send)
