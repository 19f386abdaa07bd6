"""
State enums for payment models.

This module defines all state enums used by payment models with django-fsm.
These are Django TextChoices for database storage and admin integration.

State Machines Overview:

PaymentTransaction States:
    pending → succeeded → refunded
    pending → failed

WebhookEvent States:
    pending → processing → processed
    pending → processing → failed (provider redelivers)
"""

from django.db import models


class PaymentProvider(models.TextChoices):
    STRIPE = "stripe", "Stripe"
    PAYPAL = "paypal", "PayPal"


class TransactionType(models.TextChoices):
    """
    What a payment pays for.

    TIP is paid on top of a completed commission; it carries no platform
    fee and leaves the commission's payment and escrow status untouched.
    """

    DEPOSIT = "deposit", "Deposit"
    MILESTONE = "milestone", "Milestone"
    FINAL = "final", "Final"
    FULL = "full", "Full"
    TIP = "tip", "Tip"


class TransactionStatus(models.TextChoices):
    """
    States for the PaymentTransaction lifecycle.

    Terminal states: FAILED, REFUNDED

    State Flow:
        PENDING → SUCCEEDED (webhook or capture, whichever lands first)
        PENDING → FAILED
        SUCCEEDED → REFUNDED
    """

    PENDING = "pending", "Pending"
    SUCCEEDED = "succeeded", "Succeeded"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class OnboardingStatus(models.TextChoices):
    """
    Stripe Connect onboarding status for PayoutAccount.

    Only COMPLETE status (with payouts enabled) allows receiving transfers.
    """

    NOT_STARTED = "not_started", "Not Started"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETE = "complete", "Complete"
    REJECTED = "rejected", "Rejected"


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    Tracks the lifecycle of webhook event processing for idempotency.

    State Flow:
        PENDING → PROCESSING → PROCESSED
        PENDING → PROCESSING → FAILED (can retry)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


__all__ = [
    "PaymentProvider",
    "TransactionType",
    "TransactionStatus",
    "OnboardingStatus",
    "WebhookEventStatus",
]
