"""
Milestone plan models.

A commission paid by milestones is split into ordered, individually paid
stages. Only the lowest unpaid milestone is unlocked; paying it locks it and
unlocks the next one.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from commissions.state_machines import MilestonePaymentStatus, MilestoneStage


class MilestoneStageTemplate(BaseModel):
    """
    Reusable stage used to generate a default plan.

    Seeded with sketch, line art, base colours and shading at 25% each.
    """

    stage = models.CharField(
        max_length=20,
        choices=MilestoneStage.choices,
        unique=True,
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    default_percentage = models.DecimalField(max_digits=5, decimal_places=2)
    typical_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["typical_order"]

    def __str__(self) -> str:
        return f"{self.title} ({self.default_percentage}%)"


class Milestone(UUIDPrimaryKeyMixin, BaseModel):
    """
    One stage of a commission's payment plan.

    Fields:
        milestone_number: 1-based position, unique per commission
        amount / percentage: Share of the price for this stage
        payment_status: unpaid until a succeeded payment credits it
        payment_transaction_id: PaymentTransaction that paid this milestone
        is_locked: Locked milestones can't be paid (only the lowest unpaid is unlocked)
        payment_required_before_work: Artist may only start once paid
        progress_update: Approval checkpoint created on completion
        revision_fee_added: A revision fee was added to amount
    """

    commission = models.ForeignKey(
        "commissions.Commission",
        on_delete=models.CASCADE,
        related_name="milestones",
    )

    milestone_number = models.PositiveIntegerField()
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    stage = models.CharField(
        max_length=20,
        choices=MilestoneStage.choices,
        default=MilestoneStage.CUSTOM,
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    percentage = models.DecimalField(max_digits=5, decimal_places=2)

    payment_status = models.CharField(
        max_length=10,
        choices=MilestonePaymentStatus.choices,
        default=MilestonePaymentStatus.UNPAID,
        db_index=True,
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_transaction_id = models.UUIDField(null=True, blank=True)

    is_locked = models.BooleanField(default=True)
    payment_required_before_work = models.BooleanField(default=True)

    progress_update = models.ForeignKey(
        "commissions.ProgressUpdate",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    due_date = models.DateField(null=True, blank=True)
    revision_fee_added = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["commission", "milestone_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["commission", "milestone_number"],
                name="unique_milestone_number_per_commission",
            ),
        ]

    def __str__(self) -> str:
        return f"Milestone({self.milestone_number}: {self.title}, {self.payment_status})"

    @property
    def is_paid(self) -> bool:
        return self.payment_status == MilestonePaymentStatus.PAID
