"""
Notification models.

Models:
    Notification: Rendered, immutable record of an event sent to a user
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class NotificationEvent(models.TextChoices):
    """Events the commission and payment services notify users about."""

    COMMISSION_REQUEST = "commission_request", "Commission Request"
    COMMISSION_ACCEPTED = "commission_accepted", "Commission Accepted"
    COMMISSION_DECLINED = "commission_declined", "Commission Declined"
    COMMISSION_COMPLETED = "commission_completed", "Commission Completed"
    COMMISSION_CANCELLED = "commission_cancelled", "Commission Cancelled"
    MILESTONE_PLAN_CONFIRMED = "milestone_plan_confirmed", "Milestone Plan Confirmed"
    MILESTONE_APPROVAL_NEEDED = "milestone_approval_needed", "Milestone Approval Needed"
    REVISION_REQUESTED = "revision_requested", "Revision Requested"
    PAYMENT_RECEIVED = "payment_received", "Payment Received"
    PAYMENT_FAILED = "payment_failed", "Payment Failed"
    PAYMENT_REFUNDED = "payment_refunded", "Payment Refunded"
    ESCROW_RELEASED = "escrow_released", "Escrow Released"


class Notification(BaseModel):
    """
    Individual notification record for a user.

    Fields:
        recipient: User receiving the notification (scopes all queries)
        event_type: Event that produced the notification
        title: Fully rendered title string
        body: Fully rendered body string
        data: Event payload (commission id, amounts)
        is_read: Whether recipient has read this notification

    Note:
        - recipient CASCADE: Notifications deleted when user deleted
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User receiving this notification",
    )

    event_type = models.CharField(
        max_length=50,
        choices=NotificationEvent.choices,
        db_index=True,
        help_text="Event that produced this notification",
    )

    title = models.CharField(
        max_length=255,
        help_text="Fully rendered notification title",
    )

    body = models.TextField(
        blank=True,
        default="",
        help_text="Fully rendered notification body",
    )

    data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Event payload (commission id, amounts)",
    )

    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether recipient has read this notification",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        read_status = "read" if self.is_read else "unread"
        return f"Notification({self.event_type}) -> User {self.recipient_id} [{read_status}]"
