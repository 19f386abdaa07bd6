"""
Escrow release to the artist's Stripe Connect account.

Succeeded payments sit in escrow (the platform's Stripe balance) until the
client releases them once the commission is completed. Release transfers
each transaction's artist_payout separately with an idempotency key per
transaction, so a release that fails halfway can simply be retried: rows
already stamped with transferred_at are skipped and Stripe deduplicates a
transfer whose response was lost.

Usage:
    from payments.services import EscrowService

    result = EscrowService().release_escrow(commission.id, request.user)
    result.total_transferred
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import F, Sum
from django.utils import timezone

from core.services import BaseService

from commissions.services.access import get_commission, require_client, require_participant
from commissions.state_machines import CommissionStatus, EscrowStatus
from commissions.models import Commission
from notifications.models import NotificationEvent
from notifications.services import notify

from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.exceptions import (
    InvalidStateTransitionError,
    PaymentProcessingError,
    PaymentValidationError,
)
from payments.models import PaymentTransaction, PayoutAccount
from payments.money import to_minor_units
from payments.state_machines import TransactionStatus

if TYPE_CHECKING:
    from authentication.models import User


@dataclass(frozen=True)
class EscrowReleaseResult:
    commission: Commission
    transferred: list[PaymentTransaction] = field(default_factory=list)
    total_transferred: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class EscrowSummary:
    commission_id: object
    escrow_status: str
    held_amount: Decimal
    transferred_amount: Decimal
    pending_transfers: int


class EscrowService(BaseService):
    """
    Releases held funds and reports what is held.

    Usage:
        # Production
        service = EscrowService()

        # Testing with mock adapter
        service = EscrowService(stripe_adapter=MockStripeAdapter)
    """

    def __init__(self, stripe_adapter: type | None = None) -> None:
        self.stripe = stripe_adapter or StripeAdapter

    def release_escrow(self, commission_id, user: User) -> EscrowReleaseResult:
        """
        Transfer every untransferred succeeded payment to the artist.

        Steps:
        1. Client only; commission completed; escrow held; payout account ready
        2. For each succeeded transaction with transferred_at NULL (tips
           included): Stripe transfer of artist_payout, then stamp
           payout_id/transferred_at with a conditional UPDATE
        3. Nothing left to transfer -> escrow released, artist notified

        Raises:
            CommissionNotFoundError / NotCommissionParticipantError
            InvalidStateTransitionError: Commission not completed or escrow not held
            PaymentValidationError: Artist has no payout-ready account
            PaymentProcessingError: A transfer failed; rows transferred before
                it stay recorded and escrow stays held
        """
        logger = self.get_logger()

        commission = get_commission(commission_id)
        require_client(commission, user, "release escrow")

        if commission.status != CommissionStatus.COMPLETED:
            raise InvalidStateTransitionError(
                "Escrow can only be released for completed commissions",
                error_code="COMMISSION_NOT_COMPLETED",
                details={"current_state": commission.status, "transition": "release_escrow"},
            )
        if commission.escrow_status != EscrowStatus.HELD:
            raise InvalidStateTransitionError(
                "No funds are held in escrow for this commission",
                error_code="ESCROW_NOT_HELD",
                details={"escrow_status": commission.escrow_status},
            )

        account = PayoutAccount.objects.filter(artist_id=commission.artist_id).first()
        if account is None or not account.is_ready_for_payouts:
            raise PaymentValidationError(
                "Artist has not connected a payout account",
                error_code="PAYOUT_ACCOUNT_REQUIRED",
                details={"artist_id": str(commission.artist_id)},
            )

        pending = PaymentTransaction.objects.filter(
            commission=commission,
            status=TransactionStatus.SUCCEEDED,
            transferred_at__isnull=True,
        ).order_by("created_at")

        transferred: list[PaymentTransaction] = []
        for txn in pending:
            log_context = {
                "commission_id": str(commission.pk),
                "transaction_id": str(txn.pk),
                "amount": str(txn.artist_payout),
            }

            payout_id = None
            if to_minor_units(txn.artist_payout) > 0:
                try:
                    transfer = self.stripe.create_transfer(
                        amount_cents=to_minor_units(txn.artist_payout),
                        destination_account=account.stripe_account_id,
                        idempotency_key=IdempotencyKeyGenerator.generate("transfer", txn.pk),
                        currency=settings.STRIPE_CURRENCY,
                        metadata={
                            "commissionId": str(commission.pk),
                            "transactionId": str(txn.pk),
                        },
                        trace_id=str(txn.pk),
                    )
                except PaymentProcessingError:
                    logger.error(
                        "Escrow transfer failed, release stopped",
                        extra={**log_context, "already_transferred": len(transferred)},
                    )
                    raise
                payout_id = transfer.id

            now = timezone.now()
            stamped = PaymentTransaction.objects.filter(
                pk=txn.pk,
                transferred_at__isnull=True,
            ).update(payout_id=payout_id, transferred_at=now, updated_at=now)
            if stamped:
                txn.payout_id, txn.transferred_at = payout_id, now
                transferred.append(txn)
                logger.info("Escrow transfer recorded", extra={**log_context, "payout_id": payout_id})

        remaining = PaymentTransaction.objects.filter(
            commission=commission,
            status=TransactionStatus.SUCCEEDED,
            transferred_at__isnull=True,
        ).exists()
        if not remaining:
            Commission.objects.filter(pk=commission.pk, escrow_status=EscrowStatus.HELD).update(
                escrow_status=EscrowStatus.RELEASED,
                version=F("version") + 1,
                updated_at=timezone.now(),
            )

        total = sum((txn.artist_payout for txn in transferred), Decimal("0.00"))
        commission = Commission.objects.get(pk=commission.pk)

        logger.info(
            "Escrow released",
            extra={
                "commission_id": str(commission.pk),
                "transfers": len(transferred),
                "total": str(total),
                "escrow_status": commission.escrow_status,
            },
        )
        notify(
            commission.artist_id,
            NotificationEvent.ESCROW_RELEASED,
            {
                "commission_id": str(commission.pk),
                "amount": str(total),
                "message": f"{total} was released to your payout account",
            },
        )

        return EscrowReleaseResult(
            commission=commission,
            transferred=transferred,
            total_transferred=total,
        )

    @classmethod
    def escrow_summary(cls, commission_id, user: User) -> EscrowSummary:
        """Artist payouts still held and already transferred, for either participant."""
        commission = get_commission(commission_id)
        require_participant(commission, user)

        succeeded = PaymentTransaction.objects.filter(
            commission=commission,
            status=TransactionStatus.SUCCEEDED,
        )
        held = succeeded.filter(transferred_at__isnull=True)

        return EscrowSummary(
            commission_id=commission.pk,
            escrow_status=commission.escrow_status,
            held_amount=held.aggregate(total=Sum("artist_payout"))["total"] or Decimal("0.00"),
            transferred_amount=(
                succeeded.filter(transferred_at__isnull=False).aggregate(total=Sum("artist_payout"))["total"]
                or Decimal("0.00")
            ),
            pending_transfers=held.count(),
        )
