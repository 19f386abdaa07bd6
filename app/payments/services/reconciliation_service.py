"""
Reconciling provider payments with local state.

Two channels report that a payment went through:

- Webhook: the provider calls payments/webhooks/<provider>/
- Capture: the client app calls payments/capture/ after the buyer approves

They may arrive in either order, twice, or concurrently. Both end in
confirm_success(), whose conditional UPDATE (pending or failed -> succeeded)
lets exactly one caller win; only the winner applies the commission
cascade (payment status, escrow hold, milestone credit) and only the
winner notifies.

Entry points return ServiceResult so the webhook views can map the outcome
to a status code without catching domain exceptions. capture() raises for
request errors (unknown order, wrong payer, provider failure) because it
backs an API endpoint.

Usage:
    from payments.services import ReconciliationService

    result = ReconciliationService().confirm_success(
        provider="paypal",
        provider_order_id="5O190127TN364715T",
        capture_id="3C679366HH908993F",
        source="webhook",
    )
    if result.success and result.data.already_processed:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from core.exceptions import PermissionDeniedError
from core.services import BaseService, ServiceResult

from commissions.models import Commission, Milestone
from commissions.services.milestones import MilestonePlanService
from commissions.state_machines import CommissionPaymentStatus, EscrowStatus
from notifications.models import NotificationEvent
from notifications.services import notify

from payments.adapters import IdempotencyKeyGenerator, PayPalAdapter, StripeAdapter
from payments.exceptions import (
    InvalidStateTransitionError,
    PaymentValidationError,
    PayPalOrderAlreadyCapturedError,
    StripeInvalidRequestError,
    TransactionNotFoundError,
)
from payments.models import PaymentTransaction
from payments.state_machines import PaymentProvider, TransactionStatus, TransactionType

if TYPE_CHECKING:
    from authentication.models import User


PAYMENT_STATUS_BY_TYPE = {
    TransactionType.DEPOSIT: CommissionPaymentStatus.DEPOSIT_PAID,
    TransactionType.MILESTONE: CommissionPaymentStatus.DEPOSIT_PAID,
    TransactionType.FULL: CommissionPaymentStatus.FULLY_PAID,
    TransactionType.FINAL: CommissionPaymentStatus.FULLY_PAID,
}

# A declined attempt leaves the provider order open; a later success wins
RECONCILABLE_STATUSES = (TransactionStatus.PENDING, TransactionStatus.FAILED)


@dataclass(frozen=True)
class ReconciliationOutcome:
    """
    Attributes:
        transaction: The transaction as stored after the call
        already_processed: Another caller got there first (or the call was a no-op)
        milestone: Milestone credited by this call, if any
    """

    transaction: PaymentTransaction
    already_processed: bool = False
    milestone: Milestone | None = None


class ReconciliationService(BaseService):
    """
    Moves PaymentTransactions out of PENDING and cascades to the commission.

    Usage:
        # Production
        service = ReconciliationService()

        # Testing with mock adapters
        service = ReconciliationService(stripe_adapter=MockStripeAdapter, paypal_adapter=MockPayPalAdapter)
    """

    def __init__(
        self,
        stripe_adapter: type | None = None,
        paypal_adapter: type | None = None,
    ) -> None:
        self.stripe = stripe_adapter or StripeAdapter
        self.paypal = paypal_adapter or PayPalAdapter

    # ==========================================================================
    # Success
    # ==========================================================================

    def confirm_success(
        self,
        provider: str,
        provider_order_id: str,
        capture_id: str | None = None,
        source: str = "webhook",
    ) -> ServiceResult[ReconciliationOutcome]:
        """
        Record that the provider captured the payment.

        Steps:
        1. Look up the transaction by (provider, provider_order_id)
        2. Already succeeded -> success(already_processed=True)
        3. Conditional UPDATE pending|failed -> succeeded; zero rows -> no-op
           success. A failed attempt the buyer retried on the same order
           still succeeds
        4. Winner only, same DB transaction: commission payment status,
           escrow hold, milestone credit
        5. Notify both participants after commit
        """
        logger = self.get_logger()
        log_context = {
            "provider": provider,
            "provider_order_id": provider_order_id,
            "capture_id": capture_id,
            "source": source,
        }

        txn = self._find(provider, Q(provider_order_id=provider_order_id))
        if txn is None:
            logger.warning("No transaction for provider order", extra=log_context)
            return ServiceResult.failure(
                f"No transaction for {provider} order {provider_order_id}",
                error_code="TRANSACTION_NOT_FOUND",
            )

        if txn.status == TransactionStatus.SUCCEEDED:
            logger.info("Payment already reconciled", extra={**log_context, "transaction_id": str(txn.pk)})
            return ServiceResult.success(ReconciliationOutcome(txn, already_processed=True))

        with transaction.atomic():
            now = timezone.now()
            fields = {"status": TransactionStatus.SUCCEEDED, "processed_at": now, "updated_at": now}
            if capture_id:
                fields["provider_capture_id"] = capture_id
            won = PaymentTransaction.objects.filter(
                pk=txn.pk,
                status__in=RECONCILABLE_STATUSES,
            ).update(**fields)

            if not won:
                current = PaymentTransaction.objects.get(pk=txn.pk)
                logger.info(
                    "Payment reconciled by another caller",
                    extra={**log_context, "transaction_id": str(txn.pk), "status": current.status},
                )
                return ServiceResult.success(ReconciliationOutcome(current, already_processed=True))

            txn = PaymentTransaction.objects.get(pk=txn.pk)
            milestone = self._apply_to_commission(txn)

        logger.info(
            "Payment succeeded",
            extra={
                **log_context,
                "transaction_id": str(txn.pk),
                "commission_id": str(txn.commission_id),
                "transaction_type": txn.transaction_type,
                "amount": str(txn.amount),
            },
        )

        payload = {
            "transaction_id": str(txn.pk),
            "commission_id": str(txn.commission_id) if txn.commission_id else None,
            "amount": str(txn.amount),
            "payment_type": txn.transaction_type,
        }
        notify(
            txn.recipient_id,
            NotificationEvent.PAYMENT_RECEIVED,
            {
                **payload,
                "message": f"You received a {txn.transaction_type} payment of {txn.amount}",
            },
        )
        notify(
            txn.payer_id,
            NotificationEvent.PAYMENT_RECEIVED,
            {
                **payload,
                "message": f"Your {txn.transaction_type} payment of {txn.amount} went through",
            },
        )

        return ServiceResult.success(ReconciliationOutcome(txn, milestone=milestone))

    def _apply_to_commission(self, txn: PaymentTransaction) -> Milestone | None:
        """Commission side effects of a succeeded payment. Runs in the caller's transaction."""
        if txn.commission_id is None:
            # Commission was purged after the payment was opened
            return None
        if txn.transaction_type == TransactionType.TIP:
            return None

        now = timezone.now()
        commission = Commission.objects.filter(pk=txn.commission_id)

        new_status = PAYMENT_STATUS_BY_TYPE[txn.transaction_type]
        status_update = commission
        if new_status != CommissionPaymentStatus.FULLY_PAID:
            status_update = commission.exclude(payment_status=CommissionPaymentStatus.FULLY_PAID)
        status_update.update(payment_status=new_status)

        commission.update(
            escrow_status=EscrowStatus.HELD,
            version=F("version") + 1,
            updated_at=now,
        )

        if txn.transaction_type != TransactionType.MILESTONE:
            return None

        return MilestonePlanService.mark_lowest_unpaid_paid(
            txn.commission_id,
            txn.pk,
            preferred_milestone_id=txn.correlation_metadata.get("milestoneId") or txn.milestone_id,
        )

    # ==========================================================================
    # Synchronous capture
    # ==========================================================================

    def capture(
        self,
        provider_order_id: str,
        user: User,
        provider: str,
    ) -> ServiceResult[ReconciliationOutcome]:
        """
        Capture channel: the client app reports the buyer finished paying.

        Raises:
            TransactionNotFoundError: Unknown provider order
            PermissionDeniedError: Caller is not the payer
            InvalidStateTransitionError: Transaction was refunded
            PaymentValidationError: Provider says the payment has not completed
            PaymentProcessingError: Provider call failed
        """
        txn = self._find(provider, Q(provider_order_id=provider_order_id))
        if txn is None:
            raise TransactionNotFoundError(
                "Payment not found",
                details={"provider": provider, "provider_order_id": provider_order_id},
            )
        if txn.payer_id != user.pk:
            raise PermissionDeniedError(
                "Only the payer can capture this payment",
                error_code="NOT_PAYER",
                details={"transaction_id": str(txn.pk)},
            )
        if txn.status == TransactionStatus.SUCCEEDED:
            return ServiceResult.success(ReconciliationOutcome(txn, already_processed=True))
        if txn.status not in RECONCILABLE_STATUSES:
            raise InvalidStateTransitionError(
                f"Cannot capture a {txn.status} payment",
                details={"current_state": txn.status, "transition": "capture"},
            )

        if provider == PaymentProvider.STRIPE:
            capture_id = self._capture_stripe(txn)
        else:
            capture_id = self._capture_paypal(txn)

        return self.confirm_success(provider, provider_order_id, capture_id, source="capture")

    def _capture_stripe(self, txn: PaymentTransaction) -> str:
        intent = self.stripe.retrieve_payment_intent(txn.provider_order_id, trace_id=str(txn.pk))
        if intent.status == "requires_capture":
            try:
                intent = self.stripe.capture_payment_intent(
                    txn.provider_order_id,
                    idempotency_key=IdempotencyKeyGenerator.generate("capture", txn.pk),
                    trace_id=str(txn.pk),
                )
            except StripeInvalidRequestError as e:
                if e.stripe_code != "payment_intent_unexpected_state":
                    raise
                # Captured between our retrieve and capture
                intent = self.stripe.retrieve_payment_intent(txn.provider_order_id, trace_id=str(txn.pk))

        if intent.status != "succeeded":
            raise PaymentValidationError(
                "Payment has not completed",
                error_code="PAYMENT_NOT_COMPLETED",
                details={"provider_status": intent.status},
            )
        return intent.latest_charge or intent.id

    def _capture_paypal(self, txn: PaymentTransaction) -> str | None:
        try:
            capture = self.paypal.capture_order(
                txn.provider_order_id,
                request_id=IdempotencyKeyGenerator.generate("capture", txn.pk),
                trace_id=str(txn.pk),
            )
        except PayPalOrderAlreadyCapturedError:
            self.get_logger().info(
                "PayPal order captured earlier",
                extra={"transaction_id": str(txn.pk), "provider_order_id": txn.provider_order_id},
            )
            return self.paypal.get_order(txn.provider_order_id, trace_id=str(txn.pk)).capture_id

        if not capture.completed:
            raise PaymentValidationError(
                "Payment has not completed",
                error_code="PAYMENT_NOT_COMPLETED",
                details={"provider_status": capture.capture_status or capture.status},
            )
        return capture.capture_id

    # ==========================================================================
    # Failure and refund
    # ==========================================================================

    def mark_failed(self, provider: str, reference: str, reason: str = "") -> ServiceResult[ReconciliationOutcome]:
        """
        pending -> failed. The commission is not touched.

        ``reference`` is the provider order id or the capture id.
        """
        logger = self.get_logger()

        with transaction.atomic():
            txn = self._find(
                provider,
                Q(provider_order_id=reference) | Q(provider_capture_id=reference),
                for_update=True,
            )
            if txn is None:
                logger.warning("No transaction to fail", extra={"provider": provider, "reference": reference})
                return ServiceResult.failure(
                    f"No transaction for {provider} reference {reference}",
                    error_code="TRANSACTION_NOT_FOUND",
                )

            try:
                txn.fail(reason=reason)
            except TransitionNotAllowed:
                logger.info(
                    "Ignoring failure for non-pending payment",
                    extra={"transaction_id": str(txn.pk), "status": txn.status},
                )
                return ServiceResult.success(ReconciliationOutcome(txn, already_processed=True))
            txn.save(update_fields=["status", "failed_at", "failure_reason", "updated_at"])

        logger.warning(
            "Payment failed",
            extra={"transaction_id": str(txn.pk), "provider": provider, "reason": reason},
        )
        notify(
            txn.payer_id,
            NotificationEvent.PAYMENT_FAILED,
            {
                "transaction_id": str(txn.pk),
                "commission_id": str(txn.commission_id) if txn.commission_id else None,
                "amount": str(txn.amount),
                "message": reason or "Your payment could not be completed",
            },
        )
        return ServiceResult.success(ReconciliationOutcome(txn))

    def mark_refunded(self, provider: str, reference: str) -> ServiceResult[ReconciliationOutcome]:
        """
        succeeded -> refunded. The commission's escrow becomes refunded once
        no other succeeded payment is waiting for release.

        ``reference`` is the capture id or the provider order id.
        """
        logger = self.get_logger()

        with transaction.atomic():
            txn = self._find(
                provider,
                Q(provider_capture_id=reference) | Q(provider_order_id=reference),
                for_update=True,
            )
            if txn is None:
                logger.warning("No transaction to refund", extra={"provider": provider, "reference": reference})
                return ServiceResult.failure(
                    f"No transaction for {provider} reference {reference}",
                    error_code="TRANSACTION_NOT_FOUND",
                )

            try:
                txn.refund()
            except TransitionNotAllowed:
                logger.info(
                    "Ignoring refund for non-succeeded payment",
                    extra={"transaction_id": str(txn.pk), "status": txn.status},
                )
                return ServiceResult.success(ReconciliationOutcome(txn, already_processed=True))
            txn.save(update_fields=["status", "refunded_at", "updated_at"])

            # Escrow stays held while other payments still wait for release
            still_held = PaymentTransaction.objects.filter(
                commission_id=txn.commission_id,
                status=TransactionStatus.SUCCEEDED,
                transferred_at__isnull=True,
            ).exists()
            if txn.commission_id and not still_held:
                Commission.objects.filter(pk=txn.commission_id).update(
                    escrow_status=EscrowStatus.REFUNDED,
                    version=F("version") + 1,
                    updated_at=timezone.now(),
                )

        logger.info("Payment refunded", extra={"transaction_id": str(txn.pk), "provider": provider})
        notify(
            txn.payer_id,
            NotificationEvent.PAYMENT_REFUNDED,
            {
                "transaction_id": str(txn.pk),
                "commission_id": str(txn.commission_id) if txn.commission_id else None,
                "amount": str(txn.amount),
                "message": f"Your payment of {txn.amount} was refunded",
            },
        )
        return ServiceResult.success(ReconciliationOutcome(txn))

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _find(provider: str, lookup: Q, for_update: bool = False) -> PaymentTransaction | None:
        queryset = PaymentTransaction.objects.filter(lookup, provider=provider)
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.order_by("created_at").first()
