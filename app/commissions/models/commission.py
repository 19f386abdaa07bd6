"""
Commission model: a client's request for artwork from an artist.

The commission is the aggregate every other record hangs off: its
conversation, milestone plan, progress updates, pending reviews and the
payment transactions recorded against it.

Usage:
    from commissions.models import Commission

    commission.accept(artist_response="Happy to take this on")
    commission.save()
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from commissions.state_machines import (
    CommissionPaymentStatus,
    CommissionStatus,
    EscrowStatus,
    PaymentType,
)


class Commission(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    A commission between a client and an artist.

    State Flow:
        PENDING -> IN_PROGRESS -> COMPLETED
        PENDING/IN_PROGRESS -> CANCELLED

    A declined request has no state: the row is purged together with its
    conversation and plan.

    Fields:
        client / artist: The two participants
        artwork_reference: Opaque id of the artwork or package the request came from
        details: What the client asked for
        budget: Client's proposed price
        final_price: Price agreed by the artist (takes precedence over budget)
        status: Lifecycle state (managed by FSM)
        payment_type: full, deposit or milestone plan
        payment_status / escrow_status: Derived from succeeded payments
        total_paid: Accrued by the calling layer through record_payment
        current_milestone: Milestone being worked on or paid next
        milestone_plan_confirmed: Set once by the client; plan is frozen after
        *_revision_*: Revision quota and fees
        version: Optimistic locking counter
    """

    # ==========================================================================
    # Participants
    # ==========================================================================

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="commissions_as_client",
        help_text="User who requested the commission",
    )

    artist = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="commissions_as_artist",
        help_text="User who creates the artwork",
    )

    # ==========================================================================
    # Request
    # ==========================================================================

    artwork_reference = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Opaque id of the source artwork or commission package",
    )

    details = models.TextField(
        help_text="Client's description of the requested work",
    )

    client_note = models.TextField(
        blank=True,
        default="",
        help_text="Optional note from the client",
    )

    deadline_text = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Free-form deadline agreed between the participants",
    )

    budget = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Client's proposed price",
    )

    final_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Price set by the artist",
    )

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    status = FSMField(
        default=CommissionStatus.PENDING,
        choices=CommissionStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the commission (managed by FSM)",
    )

    artist_response = models.TextField(
        blank=True,
        default="",
        help_text="Artist's reply when accepting",
    )

    responded_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # ==========================================================================
    # Payment
    # ==========================================================================

    payment_type = models.CharField(
        max_length=20,
        choices=PaymentType.choices,
        default=PaymentType.FULL,
        help_text="How the client pays (full, deposit, milestone plan)",
    )

    payment_status = models.CharField(
        max_length=20,
        choices=CommissionPaymentStatus.choices,
        default=CommissionPaymentStatus.PENDING,
        db_index=True,
    )

    escrow_status = models.CharField(
        max_length=20,
        choices=EscrowStatus.choices,
        default=EscrowStatus.NONE,
        db_index=True,
    )

    deposit_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("50.00"),
        help_text="Share of the price charged as deposit",
    )

    total_paid = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Amount accrued through record_payment",
    )

    # ==========================================================================
    # Milestone plan
    # ==========================================================================

    current_milestone = models.ForeignKey(
        "commissions.Milestone",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Milestone being worked on or paid next",
    )

    milestone_plan_confirmed = models.BooleanField(
        default=False,
        help_text="Whether the client confirmed the milestone plan",
    )

    # ==========================================================================
    # Revisions
    # ==========================================================================

    current_revision_count = models.PositiveIntegerField(default=0)
    max_revision_count = models.PositiveIntegerField(default=2)
    revision_fee_per_request = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Fee charged per revision beyond the free quota",
    )
    total_revision_fees = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["artist", "status"], name="commission_artist_status_idx"),
            models.Index(fields=["client", "status"], name="commission_client_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Commission({self.id}, {self.status})"

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def price(self) -> Decimal | None:
        """Agreed price, falling back to the client's budget."""
        return self.final_price if self.final_price is not None else self.budget

    def is_participant(self, user) -> bool:
        return user.pk in (self.client_id, self.artist_id)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=CommissionStatus.PENDING,
        target=CommissionStatus.IN_PROGRESS,
    )
    def accept(self, artist_response: str = ""):
        """
        Artist takes the commission.

        Transition: PENDING -> IN_PROGRESS
        """
        self.responded_at = timezone.now()
        if artist_response:
            self.artist_response = artist_response

    @transition(
        field=status,
        source=CommissionStatus.IN_PROGRESS,
        target=CommissionStatus.COMPLETED,
    )
    def complete(self):
        """
        Artist delivers the final artwork.

        Transition: IN_PROGRESS -> COMPLETED
        """
        self.completed_at = timezone.now()

    @transition(
        field=status,
        source=[CommissionStatus.PENDING, CommissionStatus.IN_PROGRESS],
        target=CommissionStatus.CANCELLED,
    )
    def cancel(self):
        """
        Client withdraws the commission.

        Transition: PENDING/IN_PROGRESS -> CANCELLED
        """
        self.cancelled_at = timezone.now()
