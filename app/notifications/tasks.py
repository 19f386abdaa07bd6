"""
Celery tasks for notification delivery.

Tasks:
    deliver_notification: Store the in-app notification for a user

Usage:
    # Called by notifications.services.notify() after commit
    deliver_notification.delay(user_id, "commission_accepted", {"commission_id": "..."})
"""

from __future__ import annotations

import logging

from celery import shared_task

from notifications.services import NotificationService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(ConnectionError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def deliver_notification(self, user_id: str, event_type: str, payload: dict) -> bool:
    """
    Store a notification for a user.

    Returns:
        True if the notification was stored, False if it was rejected
    """
    result = NotificationService.create_notification(user_id, event_type, payload)
    if not result.success:
        logger.error(
            f"Notification for user {user_id} rejected: {result.error}",
            extra={"event_type": event_type, "error_code": result.error_code},
        )
        return False

    logger.info(
        f"Delivered {event_type} notification to user {user_id}",
        extra={"notification_id": result.data.id},
    )
    return True
