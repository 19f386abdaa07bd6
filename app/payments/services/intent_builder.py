"""
Opening payments with Stripe or PayPal.

PaymentIntentBuilder works out what the client owes for a given payment
type, records a pending PaymentTransaction and opens the matching
provider object (a Stripe PaymentIntent or a PayPal order). The client
app completes the payment with the returned client secret or approval URL;
reconciliation takes over from there.

The transaction row is committed before the provider is called, and the
provider call carries an idempotency key derived from the transaction id,
so a failed or lost provider response leaves a retry-safe pending row.

Usage:
    from payments.services import PaymentIntentBuilder

    result = PaymentIntentBuilder().open_payment(
        commission_id=commission.id,
        user=request.user,
        payment_type="deposit",
        provider="stripe",
    )
    result.client_secret_or_approval_url
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from commissions.models import Commission, Milestone
from commissions.services.access import get_commission, require_client
from commissions.exceptions import MilestoneNotFoundError
from commissions.state_machines import CommissionStatus, MilestonePaymentStatus

from payments.adapters import (
    CreateOrderParams,
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PayPalAdapter,
    StripeAdapter,
)
from payments.correlation import CorrelationMetadata
from payments.exceptions import InvalidStateTransitionError, PaymentValidationError
from payments.models import PaymentTransaction
from payments.money import split_platform_fee, to_cents, to_minor_units
from payments.state_machines import PaymentProvider, TransactionType

if TYPE_CHECKING:
    from authentication.models import User


@dataclass(frozen=True)
class OpenPaymentResult:
    provider: str
    provider_order_id: str
    client_secret_or_approval_url: str | None
    amount_due: Decimal
    transaction_id: object
    platform_fee: Decimal
    artist_payout: Decimal


class PaymentIntentBuilder(BaseService):
    """
    Builds provider payments for commissions.

    Usage:
        # Production
        builder = PaymentIntentBuilder()

        # Testing with mock adapters
        builder = PaymentIntentBuilder(stripe_adapter=MockStripeAdapter, paypal_adapter=MockPayPalAdapter)
    """

    def __init__(
        self,
        stripe_adapter: type | None = None,
        paypal_adapter: type | None = None,
    ) -> None:
        self.stripe = stripe_adapter or StripeAdapter
        self.paypal = paypal_adapter or PayPalAdapter

    def open_payment(
        self,
        commission_id,
        user: User,
        payment_type: str,
        provider: str,
        amount: Decimal | None = None,
        milestone_id=None,
    ) -> OpenPaymentResult:
        """
        Open a provider payment for the commission's client.

        Raises:
            PaymentValidationError: Unknown provider or payment type, missing
                price, missing milestone, non-positive amount
            CommissionNotFoundError / MilestoneNotFoundError
            NotCommissionParticipantError: Caller is not the client
            InvalidStateTransitionError: Milestone paid or locked, tip on an
                unfinished commission
            PaymentProcessingError: Provider call failed (row stays pending)
        """
        logger = self.get_logger()

        if provider not in PaymentProvider.values:
            raise PaymentValidationError(
                f"Unsupported payment provider: {provider}",
                error_code="INVALID_PROVIDER",
                details={"provider": provider},
            )
        if payment_type not in TransactionType.values:
            raise PaymentValidationError(
                f"Unsupported payment type: {payment_type}",
                error_code="INVALID_PAYMENT_TYPE",
                details={"payment_type": payment_type},
            )

        commission = get_commission(commission_id)
        require_client(commission, user, "pay for this commission")

        milestone = None
        if payment_type == TransactionType.MILESTONE:
            milestone = self._payable_milestone(commission, milestone_id)
            amount_due = milestone.amount
        else:
            amount_due = self._amount_due(commission, payment_type, amount)

        amount_due = to_cents(amount_due)
        if amount_due <= 0:
            raise PaymentValidationError(
                "Payment amount must be positive",
                error_code="INVALID_AMOUNT",
                details={"amount": str(amount_due)},
            )

        platform_fee, artist_payout = split_platform_fee(amount_due, payment_type)
        correlation = CorrelationMetadata(
            commission_id=str(commission.pk),
            payment_type=payment_type,
            milestone_id=str(milestone.pk) if milestone else None,
        )

        txn = PaymentTransaction.objects.create(
            commission=commission,
            milestone=milestone,
            payer=user,
            recipient_id=commission.artist_id,
            provider=provider,
            transaction_type=payment_type,
            amount=amount_due,
            currency=self._currency(provider),
            platform_fee=platform_fee,
            artist_payout=artist_payout,
            correlation_metadata=correlation.as_dict(),
        )

        logger.info(
            "Opening payment",
            extra={
                "transaction_id": str(txn.pk),
                "commission_id": str(commission.pk),
                "provider": provider,
                "payment_type": payment_type,
                "amount": str(amount_due),
            },
        )

        description = (
            f"Milestone Payment - {milestone.title}"
            if milestone
            else f"Commission Payment - {payment_type}"
        )
        if provider == PaymentProvider.STRIPE:
            intent = self.stripe.create_payment_intent(
                CreatePaymentIntentParams(
                    amount_cents=to_minor_units(amount_due),
                    currency=txn.currency,
                    idempotency_key=IdempotencyKeyGenerator.generate("create_intent", txn.pk),
                    metadata={
                        **correlation.as_dict(),
                        "correlation": correlation.to_token(),
                        "transactionId": str(txn.pk),
                    },
                    description=description,
                ),
                trace_id=str(txn.pk),
            )
            provider_order_id, redirect = intent.id, intent.client_secret
        else:
            order = self.paypal.create_order(
                CreateOrderParams(
                    amount=amount_due,
                    currency=txn.currency,
                    custom_id=correlation.to_token(),
                    reference_id=str(commission.pk),
                    description=description,
                    request_id=IdempotencyKeyGenerator.generate("create_order", txn.pk),
                ),
                trace_id=str(txn.pk),
            )
            provider_order_id, redirect = order.id, order.approval_url

        PaymentTransaction.objects.filter(pk=txn.pk).update(
            provider_order_id=provider_order_id,
            updated_at=timezone.now(),
        )

        logger.info(
            "Payment opened",
            extra={"transaction_id": str(txn.pk), "provider_order_id": provider_order_id},
        )

        return OpenPaymentResult(
            provider=provider,
            provider_order_id=provider_order_id,
            client_secret_or_approval_url=redirect,
            amount_due=amount_due,
            transaction_id=txn.pk,
            platform_fee=platform_fee,
            artist_payout=artist_payout,
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _currency(provider: str) -> str:
        if provider == PaymentProvider.PAYPAL:
            return settings.PAYPAL_CURRENCY.upper()
        return settings.STRIPE_CURRENCY.lower()

    @staticmethod
    def _amount_due(commission: Commission, payment_type: str, amount: Decimal | None) -> Decimal:
        if payment_type == TransactionType.TIP:
            if commission.status != CommissionStatus.COMPLETED:
                raise InvalidStateTransitionError(
                    "Tips can only be sent for completed commissions",
                    error_code="COMMISSION_NOT_COMPLETED",
                    details={"current_state": commission.status},
                )
            if amount is None:
                raise PaymentValidationError(
                    "Tip amount is required",
                    error_code="AMOUNT_REQUIRED",
                )
            return amount

        price = commission.price
        if price is None:
            raise PaymentValidationError(
                "Commission has no price yet",
                error_code="PRICE_REQUIRED",
                details={"commission_id": str(commission.pk)},
            )

        if payment_type == TransactionType.DEPOSIT:
            return price * commission.deposit_percentage / Decimal(100)
        if payment_type == TransactionType.FINAL:
            return price - commission.total_paid
        return price

    @staticmethod
    def _payable_milestone(commission: Commission, milestone_id) -> Milestone:
        if not milestone_id:
            raise PaymentValidationError(
                "milestone_id is required for milestone payments",
                error_code="MILESTONE_REQUIRED",
            )

        milestone = Milestone.objects.filter(pk=milestone_id, commission=commission).first()
        if milestone is None:
            raise MilestoneNotFoundError(
                f"Milestone {milestone_id} not found for this commission",
                details={"milestone_id": str(milestone_id), "commission_id": str(commission.pk)},
            )
        if milestone.payment_status == MilestonePaymentStatus.PAID:
            raise InvalidStateTransitionError(
                "Milestone is already paid",
                error_code="MILESTONE_ALREADY_PAID",
                details={"milestone_id": str(milestone.pk)},
            )
        if milestone.is_locked:
            raise InvalidStateTransitionError(
                "Milestone is locked until the previous milestone is paid",
                error_code="MILESTONE_LOCKED",
                details={"milestone_id": str(milestone.pk)},
            )
        return milestone
