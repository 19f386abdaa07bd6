"""
Progress updates and pending reviews.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel

from commissions.state_machines import ApprovalStatus, ProgressUpdateType, ReviewType


class ProgressUpdate(BaseModel):
    """
    Work-in-progress post on a commission.

    Completing a milestone creates an approval checkpoint the client must
    review; a client's revision request is recorded the same way.
    """

    commission = models.ForeignKey(
        "commissions.Commission",
        on_delete=models.CASCADE,
        related_name="progress_updates",
    )
    milestone = models.ForeignKey(
        "commissions.Milestone",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="progress_updates",
    )
    update_type = models.CharField(
        max_length=30,
        choices=ProgressUpdateType.choices,
        default=ProgressUpdateType.WIP_IMAGE,
    )
    image_url = models.URLField(max_length=500, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    requires_approval = models.BooleanField(default=False)
    approval_status = models.CharField(
        max_length=30,
        choices=ApprovalStatus.choices,
        null=True,
        blank=True,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"ProgressUpdate({self.pk}, {self.update_type})"


class PendingReview(BaseModel):
    """Review a participant still owes the other once a commission completes."""

    commission = models.ForeignKey(
        "commissions.Commission",
        on_delete=models.CASCADE,
        related_name="pending_reviews",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="pending_reviews",
    )
    review_type = models.CharField(max_length=20, choices=ReviewType.choices)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["commission", "user", "review_type"],
                name="unique_pending_review",
            ),
        ]

    def __str__(self) -> str:
        return f"PendingReview({self.review_type}, user={self.user_id})"
