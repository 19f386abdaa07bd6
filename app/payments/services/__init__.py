"""
Payment services for opening, reconciling and releasing commission payments.

This module provides:
- PaymentIntentBuilder: Opens a Stripe PaymentIntent or PayPal order
- ReconciliationService: Applies webhook and capture outcomes exactly once
- EscrowService: Transfers held payouts to the artist

Usage:
    from payments.services import PaymentIntentBuilder, ReconciliationService

    opened = PaymentIntentBuilder().open_payment(
        commission_id=commission.id,
        user=client,
        payment_type="deposit",
        provider="paypal",
    )

    result = ReconciliationService().capture(opened.provider_order_id, client, "paypal")
"""

from payments.services.escrow_service import (
    EscrowReleaseResult,
    EscrowService,
    EscrowSummary,
)
from payments.services.intent_builder import OpenPaymentResult, PaymentIntentBuilder
from payments.services.reconciliation_service import (
    ReconciliationOutcome,
    ReconciliationService,
)

__all__ = [
    "EscrowReleaseResult",
    "EscrowService",
    "EscrowSummary",
    "OpenPaymentResult",
    "PaymentIntentBuilder",
    "ReconciliationOutcome",
    "ReconciliationService",
]
