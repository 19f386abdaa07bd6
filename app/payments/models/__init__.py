"""
Payment domain models.

This module contains all payment-related models:
- PaymentTransaction: One client payment against a commission
- PayoutAccount: Stripe Connect account that receives escrow releases
- WebhookEvent: Provider webhook event tracking for idempotent processing
"""

from payments.models.payout_account import PayoutAccount
from payments.models.transaction import PaymentTransaction
from payments.models.webhook_event import WebhookEvent

__all__ = [
    "PaymentTransaction",
    "PayoutAccount",
    "WebhookEvent",
]
