"""
Payment adapters for external services.

All Stripe and PayPal API calls go through these adapters to ensure
consistent error handling, timeouts, idempotency, and observability.

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    result = StripeAdapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount_cents=5000,
            currency="usd",
            idempotency_key="create_intent:txn_123:1:ab12cd34",
        )
    )
"""

from payments.adapters.paypal_adapter import (
    CaptureResult,
    CreateOrderParams,
    OrderResult,
    PayPalAdapter,
)
from payments.adapters.stripe_adapter import (
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    StripeAdapter,
    TransferResult,
)

__all__ = [
    "CaptureResult",
    "CreateOrderParams",
    "CreatePaymentIntentParams",
    "IdempotencyKeyGenerator",
    "OrderResult",
    "PaymentIntentResult",
    "PayPalAdapter",
    "StripeAdapter",
    "TransferResult",
]
