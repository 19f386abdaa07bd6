"""
PaymentTransaction model: one payment a client makes against a commission.

A transaction row is written before the provider is called, so every
provider order the platform ever opened has a local record. Reconciliation
moves it out of PENDING exactly once, whichever of the webhook and the
synchronous capture arrives first.

Usage:
    from payments.models import PaymentTransaction

    txn = PaymentTransaction.objects.get(
        provider=PaymentProvider.STRIPE,
        provider_order_id="pi_123",
    )
    txn.fail(reason="card_declined")
    txn.save()
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import PaymentProvider, TransactionStatus, TransactionType


class PaymentTransaction(UUIDPrimaryKeyMixin, BaseModel):
    """
    A single provider payment.

    State Flow:
        PENDING -> SUCCEEDED -> REFUNDED
        PENDING -> FAILED

    PENDING -> SUCCEEDED is not an FSM transition: reconciliation performs
    it as a conditional UPDATE so the webhook and the capture endpoint can
    race without double-applying side effects.

    Fields:
        commission / milestone: What was paid for (nulled if the commission
            is purged; the money trail stays)
        payer / recipient: Client and artist
        provider / provider_order_id: Stripe PaymentIntent id or PayPal order id
        provider_capture_id: Stripe charge id or PayPal capture id
        transaction_type: deposit, milestone, final, full or tip
        amount / platform_fee / artist_payout: amount = platform_fee + artist_payout
        correlation_metadata: commissionId, paymentType and milestoneId as
            sent to the provider
        payout_id / transferred_at: Set once escrow released this row
    """

    # ==========================================================================
    # What was paid for
    # ==========================================================================

    commission = models.ForeignKey(
        "commissions.Commission",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_transactions",
    )

    milestone = models.ForeignKey(
        "commissions.Milestone",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_transactions",
    )

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_made",
    )

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payments_received",
    )

    # ==========================================================================
    # Provider
    # ==========================================================================

    provider = models.CharField(max_length=20, choices=PaymentProvider.choices)

    provider_order_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Stripe PaymentIntent id (pi_xxx) or PayPal order id",
    )

    provider_capture_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Stripe charge id or PayPal capture id",
    )

    # ==========================================================================
    # Money
    # ==========================================================================

    transaction_type = models.CharField(max_length=20, choices=TransactionType.choices)

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="usd")
    platform_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    artist_payout = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    status = FSMField(
        default=TransactionStatus.PENDING,
        choices=TransactionStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payment (managed by FSM)",
    )

    correlation_metadata = models.JSONField(default=dict, blank=True)

    processed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.TextField(blank=True, default="")

    # ==========================================================================
    # Escrow release
    # ==========================================================================

    payout_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Stripe Transfer id (tr_xxx) once released to the artist",
    )
    transferred_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "provider_order_id"],
                name="unique_provider_order",
            ),
        ]
        indexes = [
            models.Index(fields=["commission", "status"], name="txn_commission_status_idx"),
            models.Index(fields=["payer", "created_at"], name="txn_payer_created_idx"),
        ]

    def __str__(self) -> str:
        return f"PaymentTransaction({self.id}, {self.provider}, {self.status}, {self.amount})"

    @property
    def is_transferred(self) -> bool:
        return self.transferred_at is not None

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=TransactionStatus.PENDING,
        target=TransactionStatus.FAILED,
    )
    def fail(self, reason: str = ""):
        """
        Provider reported the payment failed or was denied.

        Transition: PENDING -> FAILED
        """
        self.failed_at = timezone.now()
        self.failure_reason = reason

    @transition(
        field=status,
        source=TransactionStatus.SUCCEEDED,
        target=TransactionStatus.REFUNDED,
    )
    def refund(self):
        """
        Provider reported the payment was refunded.

        Transition: SUCCEEDED -> REFUNDED
        """
        self.refunded_at = timezone.now()
