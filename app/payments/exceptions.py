"""
Payment-specific exceptions for payment operations.

This module provides a hierarchy of exceptions for opening payments,
reconciling provider callbacks and releasing escrow, including the
errors translated from the Stripe SDK and the PayPal REST API.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError - Payment entity lookup failures (HTTP 404)
    │   └── TransactionNotFoundError - No transaction for a provider reference
    ├── PaymentValidationError - Payment validation failures (HTTP 400)
    └── PaymentProcessingError - Provider failures (HTTP 502)
        ├── StripeError - Base for all Stripe errors
        │   ├── StripeCardDeclinedError - Card declined (permanent)
        │   ├── StripeInsufficientFundsError - Insufficient funds (permanent)
        │   ├── StripeInvalidAccountError - Invalid Stripe account (permanent)
        │   ├── StripeInvalidRequestError - Invalid request params (permanent)
        │   ├── StripeRateLimitError - Rate limited (transient, retry)
        │   ├── StripeAPIUnavailableError - API unavailable (transient, retry)
        │   └── StripeTimeoutError - Request timeout (transient, retry)
        └── PayPalError - Base for all PayPal errors
            ├── PayPalAuthenticationError - OAuth credentials rejected (permanent)
            ├── PayPalInvalidRequestError - Malformed request (permanent)
            ├── PayPalUnprocessableError - Business rule rejected (permanent)
            │   └── PayPalOrderAlreadyCapturedError - Order captured earlier
            ├── PayPalWebhookVerificationError - Webhook signature rejected
            ├── PayPalRateLimitError - Rate limited (transient, retry)
            ├── PayPalAPIUnavailableError - API unavailable (transient, retry)
            └── PayPalTimeoutError - Request timeout (transient, retry)

    InvalidStateTransitionError - Operation not allowed in current state
        (re-exported from commissions.exceptions, inherits ConflictError)

Usage:
    from payments.exceptions import (
        PaymentValidationError,
        TransactionNotFoundError,
        InvalidStateTransitionError,
    )

    raise TransactionNotFoundError(
        "No transaction for provider order",
        details={"provider": "stripe", "provider_order_id": "pi_123"},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

from commissions.exceptions import InvalidStateTransitionError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    All payment-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent API error responses.

    Example:
        try:
            PaymentIntentBuilder().open_payment(...)
        except PaymentError as e:
            return Response(e.to_dict(), status=e.http_status)
    """

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError):
    """
    Raised when a payment entity cannot be found.

    Use for:
    - PaymentTransaction lookup fails
    - PayoutAccount lookup fails
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"
    http_status: int = 404


class TransactionNotFoundError(PaymentNotFoundError):
    default_error_code: str = "TRANSACTION_NOT_FOUND"


class PaymentValidationError(PaymentError):
    """
    Raised when payment validation fails.

    Use for:
    - Invalid payment amount or type
    - Unsupported provider
    - Missing price or milestone
    - Artist without a payout account

    Example:
        if amount <= 0:
            raise PaymentValidationError(
                "Payment amount must be positive",
                error_code="INVALID_AMOUNT",
                details={"amount": str(amount)},
            )
    """

    default_error_code: str = "PAYMENT_VALIDATION_ERROR"


class PaymentProcessingError(PaymentError):
    """
    Raised when a payment provider call fails.

    Provider adapters translate SDK and HTTP errors into subclasses of
    this exception; it reaches API clients as a 502.
    """

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    http_status: int = 502
    is_retryable: bool = False


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(PaymentProcessingError):
    """
    Base exception for all Stripe-related errors.

    Provides common attributes for Stripe error handling:
    - stripe_code: Stripe's internal error code
    - decline_code: Card decline code (if applicable)
    - is_retryable: Whether the operation can be retried

    Use is_retryable to determine retry behavior:
    - True: Transient error, safe to retry with backoff
    - False: Permanent error, do not retry
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class StripeCardDeclinedError(StripeError):
    """
    Card was declined by the issuing bank.

    This is a permanent error - do not retry with the same card.
    The decline_code attribute contains the specific reason.
    """

    default_error_code: str = "CARD_DECLINED"


class StripeInsufficientFundsError(StripeError):
    """
    Insufficient funds on the payment method, or on the platform balance
    when creating a transfer.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"


class StripeInvalidAccountError(StripeError):
    """
    Invalid Stripe Connect account.

    Raised when the destination account for a transfer is missing,
    disabled or restricted.
    """

    default_error_code: str = "INVALID_STRIPE_ACCOUNT"


class StripeInvalidRequestError(StripeError):
    """
    Invalid parameters, unknown resource or a rejected webhook signature.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"


# -----------------------------------------------------------------------------
# Transient Errors (retry with backoff)
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe API is unreachable or returned a server error.

    Safe to retry: every mutating call carries an idempotency key.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


class StripeTimeoutError(StripeError):
    default_error_code: str = "STRIPE_TIMEOUT"
    is_retryable: bool = True


# =============================================================================
# PayPal-Specific Exceptions
# =============================================================================


class PayPalError(PaymentProcessingError):
    """
    Base exception for all PayPal-related errors.

    Attributes:
        paypal_issue: First issue code from PayPal's error body
            (e.g. ORDER_ALREADY_CAPTURED, INSTRUMENT_DECLINED)
        debug_id: PayPal's debug_id for support requests
        status_code: HTTP status returned by PayPal, if any
    """

    default_error_code: str = "PAYPAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        paypal_issue: str | None = None,
        debug_id: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if paypal_issue:
            details["paypal_issue"] = paypal_issue
        if debug_id:
            details["debug_id"] = debug_id
        super().__init__(message, error_code=error_code, details=details)
        self.paypal_issue = paypal_issue
        self.debug_id = debug_id
        self.status_code = status_code


class PayPalAuthenticationError(PayPalError):
    """OAuth client credentials were rejected. Check PAYPAL_CLIENT_ID/SECRET."""

    default_error_code: str = "PAYPAL_AUTHENTICATION_FAILED"


class PayPalInvalidRequestError(PayPalError):
    default_error_code: str = "INVALID_PAYPAL_REQUEST"


class PayPalUnprocessableError(PayPalError):
    """
    PayPal understood the request but refused it (HTTP 422).

    paypal_issue carries the reason, e.g. INSTRUMENT_DECLINED or
    ORDER_NOT_APPROVED.
    """

    default_error_code: str = "PAYPAL_UNPROCESSABLE"


class PayPalOrderAlreadyCapturedError(PayPalUnprocessableError):
    """
    The order was captured by an earlier request.

    Capture callers treat this as success and look up the existing capture.
    """

    default_error_code: str = "ORDER_ALREADY_CAPTURED"


class PayPalWebhookVerificationError(PayPalError):
    default_error_code: str = "INVALID_PAYPAL_WEBHOOK"
    http_status: int = 400


class PayPalRateLimitError(PayPalError):
    default_error_code: str = "PAYPAL_RATE_LIMITED"
    is_retryable: bool = True


class PayPalAPIUnavailableError(PayPalError):
    default_error_code: str = "PAYPAL_UNAVAILABLE"
    is_retryable: bool = True


class PayPalTimeoutError(PayPalError):
    default_error_code: str = "PAYPAL_TIMEOUT"
    is_retryable: bool = True


__all__ = [
    # Payment domain
    "PaymentError",
    "PaymentNotFoundError",
    "TransactionNotFoundError",
    "PaymentValidationError",
    "PaymentProcessingError",
    # Stripe
    "StripeError",
    "StripeCardDeclinedError",
    "StripeInsufficientFundsError",
    "StripeInvalidAccountError",
    "StripeInvalidRequestError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    "StripeTimeoutError",
    # PayPal
    "PayPalError",
    "PayPalAuthenticationError",
    "PayPalInvalidRequestError",
    "PayPalUnprocessableError",
    "PayPalOrderAlreadyCapturedError",
    "PayPalWebhookVerificationError",
    "PayPalRateLimitError",
    "PayPalAPIUnavailableError",
    "PayPalTimeoutError",
    # State
    "InvalidStateTransitionError",
]
