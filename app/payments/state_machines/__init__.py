"""
State machine enums for payment models.
"""

from payments.state_machines.states import (
    OnboardingStatus,
    PaymentProvider,
    TransactionStatus,
    TransactionType,
    WebhookEventStatus,
)

__all__ = [
    "OnboardingStatus",
    "PaymentProvider",
    "TransactionStatus",
    "TransactionType",
    "WebhookEventStatus",
]
