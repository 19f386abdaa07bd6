"""
PayPal REST API adapter for checkout orders.

All PayPal calls go through this adapter so they share the same timeout,
error translation and structured logging as the Stripe adapter. Calls use
``requests`` against the Orders v2 and Notifications v1 APIs.

Configuration (via settings):
- PAYPAL_CLIENT_ID / PAYPAL_CLIENT_SECRET: REST app credentials
- PAYPAL_API_BASE: https://api-m.sandbox.paypal.com or https://api-m.paypal.com
- PAYPAL_WEBHOOK_ID: Id of the webhook registered for this app
- PAYPAL_API_TIMEOUT_SECONDS: Request timeout (default: 10)
- PAYPAL_RETURN_URL / PAYPAL_CANCEL_URL: Where the buyer lands after approval

Usage:
    from payments.adapters import PayPalAdapter, CreateOrderParams

    order = PayPalAdapter.create_order(
        CreateOrderParams(
            amount=Decimal("200.00"),
            currency="USD",
            custom_id="5f0c...|deposit",
            reference_id=str(commission.id),
            description="Commission Payment - deposit",
            request_id=IdempotencyKeyGenerator.generate("create_order", txn.id),
        )
    )
    redirect_to(order.approval_url)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import requests
from django.conf import settings
from django.core.cache import cache

from payments.exceptions import (
    PayPalAPIUnavailableError,
    PayPalAuthenticationError,
    PayPalInvalidRequestError,
    PayPalOrderAlreadyCapturedError,
    PayPalRateLimitError,
    PayPalTimeoutError,
    PayPalUnprocessableError,
    PayPalWebhookVerificationError,
)

ACCESS_TOKEN_CACHE_KEY = "payments:paypal:access_token"

# Headers PayPal signs webhook deliveries with
WEBHOOK_SIGNATURE_HEADERS = {
    "auth_algo": "PAYPAL-AUTH-ALGO",
    "cert_url": "PAYPAL-CERT-URL",
    "transmission_id": "PAYPAL-TRANSMISSION-ID",
    "transmission_sig": "PAYPAL-TRANSMISSION-SIG",
    "transmission_time": "PAYPAL-TRANSMISSION-TIME",
}


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateOrderParams:
    """
    Parameters for creating a PayPal checkout order.

    Attributes:
        amount: Decimal amount, sent with two decimals
        currency: ISO 4217 currency code
        custom_id: Correlation token (127 characters max)
        reference_id: Commission id
        description: Shown to the buyer on the approval page
        request_id: PayPal-Request-Id for idempotent creation
    """

    amount: Decimal
    currency: str
    custom_id: str
    reference_id: str
    description: str
    request_id: str

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("amount must be positive")
        if len(self.custom_id) > 127:
            raise ValueError("custom_id must be at most 127 characters")
        if not self.request_id:
            raise ValueError("request_id is required")


@dataclass
class OrderResult:
    """
    Result from order creation or lookup.

    Attributes:
        id: PayPal order id
        status: CREATED, APPROVED, COMPLETED, ...
        approval_url: Link the buyer follows to approve the payment
        capture_id: Id of the first capture, once the order is captured
        raw_response: Full PayPal response body
    """

    id: str
    status: str
    approval_url: str | None = None
    capture_id: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class CaptureResult:
    """
    Result from capturing an approved order.

    Attributes:
        order_id: PayPal order id
        status: Order status (COMPLETED on success)
        capture_id: Id of the capture inside the purchase unit
        capture_status: COMPLETED, PENDING, DECLINED, ...
        custom_id: Correlation token echoed back by PayPal
        raw_response: Full PayPal response body
    """

    order_id: str
    status: str
    capture_id: str | None = None
    capture_status: str | None = None
    custom_id: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.status == "COMPLETED" and self.capture_status in (None, "COMPLETED")


def _first_capture(body: dict[str, Any]) -> dict[str, Any]:
    for unit in body.get("purchase_units") or []:
        captures = (unit.get("payments") or {}).get("captures") or []
        if captures:
            return captures[0]
    return {}


def _link(body: dict[str, Any], rel: str) -> str | None:
    for link in body.get("links") or []:
        if link.get("rel") == rel:
            return link.get("href")
    return None


# =============================================================================
# PayPal Adapter
# =============================================================================


class PayPalAdapter:
    """
    Adapter for PayPal REST API operations.

    All methods are classmethods; the only shared state is the cached
    OAuth access token.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _base_url() -> str:
        return settings.PAYPAL_API_BASE.rstrip("/")

    @staticmethod
    def _timeout() -> int:
        return getattr(settings, "PAYPAL_API_TIMEOUT_SECONDS", 10)

    # =========================================================================
    # Authentication
    # =========================================================================

    @classmethod
    def get_access_token(cls) -> str:
        """
        OAuth2 client-credentials token, cached until shortly before expiry.

        Raises:
            PayPalAuthenticationError: Credentials rejected
            PayPalAPIUnavailableError / PayPalTimeoutError: PayPal unreachable
        """
        token = cache.get(ACCESS_TOKEN_CACHE_KEY)
        if token:
            return token

        body = cls._send(
            "POST",
            "/v1/oauth2/token",
            log_context={"operation": "get_access_token"},
            auth=(settings.PAYPAL_CLIENT_ID, settings.PAYPAL_CLIENT_SECRET),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )

        token = body["access_token"]
        expires_in = int(body.get("expires_in", 3600))
        cache.set(ACCESS_TOKEN_CACHE_KEY, token, timeout=max(expires_in - 60, 60))
        return token

    # =========================================================================
    # Orders
    # =========================================================================

    @classmethod
    def create_order(cls, params: CreateOrderParams, trace_id: str | None = None) -> OrderResult:
        """
        Create a CAPTURE-intent order the buyer approves on PayPal.

        Raises:
            PayPalInvalidRequestError: Invalid parameters
            PayPalAPIUnavailableError: PayPal service unavailable
        """
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": params.reference_id,
                    "description": params.description,
                    "custom_id": params.custom_id,
                    "amount": {
                        "currency_code": params.currency.upper(),
                        "value": f"{params.amount:.2f}",
                    },
                }
            ],
            "application_context": {
                "landing_page": "NO_PREFERENCE",
                "user_action": "PAY_NOW",
                "return_url": settings.PAYPAL_RETURN_URL,
                "cancel_url": settings.PAYPAL_CANCEL_URL,
            },
        }

        body = cls._request(
            "POST",
            "/v2/checkout/orders",
            log_context={
                "operation": "create_order",
                "amount": str(params.amount),
                "currency": params.currency,
                "request_id": params.request_id,
                "trace_id": trace_id,
            },
            json=payload,
            request_id=params.request_id,
        )
        return OrderResult(
            id=body["id"],
            status=body.get("status", ""),
            approval_url=_link(body, "approve") or _link(body, "payer-action"),
            raw_response=body,
        )

    @classmethod
    def get_order(cls, order_id: str, trace_id: str | None = None) -> OrderResult:
        body = cls._request(
            "GET",
            f"/v2/checkout/orders/{order_id}",
            log_context={"operation": "get_order", "order_id": order_id, "trace_id": trace_id},
            level=logging.DEBUG,
        )
        return OrderResult(
            id=body["id"],
            status=body.get("status", ""),
            approval_url=_link(body, "approve"),
            capture_id=_first_capture(body).get("id"),
            raw_response=body,
        )

    @classmethod
    def capture_order(
        cls,
        order_id: str,
        request_id: str,
        trace_id: str | None = None,
    ) -> CaptureResult:
        """
        Capture an approved order.

        Raises:
            PayPalOrderAlreadyCapturedError: An earlier request captured it
            PayPalUnprocessableError: Not approved, instrument declined, ...
            PayPalAPIUnavailableError: PayPal service unavailable
        """
        body = cls._request(
            "POST",
            f"/v2/checkout/orders/{order_id}/capture",
            log_context={
                "operation": "capture_order",
                "order_id": order_id,
                "request_id": request_id,
                "trace_id": trace_id,
            },
            json={},
            request_id=request_id,
        )
        capture = _first_capture(body)
        units = body.get("purchase_units") or [{}]
        return CaptureResult(
            order_id=body.get("id", order_id),
            status=body.get("status", ""),
            capture_id=capture.get("id"),
            capture_status=capture.get("status"),
            custom_id=capture.get("custom_id") or units[0].get("custom_id"),
            raw_response=body,
        )

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def verify_webhook_signature(cls, headers: Mapping[str, str], event: dict[str, Any]) -> None:
        """
        Ask PayPal to verify a webhook delivery.

        Args:
            headers: Request headers (case-insensitive mapping, e.g. request.headers)
            event: Parsed webhook body

        Raises:
            PayPalWebhookVerificationError: Missing headers or signature rejected
            PayPalAPIUnavailableError / PayPalTimeoutError: Verification unavailable
        """
        signature = {key: headers.get(header) for key, header in WEBHOOK_SIGNATURE_HEADERS.items()}
        missing = [WEBHOOK_SIGNATURE_HEADERS[key] for key, value in signature.items() if not value]
        if missing:
            raise PayPalWebhookVerificationError(
                "Missing PayPal signature headers",
                details={"missing_headers": missing},
            )
        if not settings.PAYPAL_WEBHOOK_ID:
            raise PayPalWebhookVerificationError("PAYPAL_WEBHOOK_ID is not configured")

        body = cls._request(
            "POST",
            "/v1/notifications/verify-webhook-signature",
            log_context={
                "operation": "verify_webhook_signature",
                "transmission_id": signature["transmission_id"],
            },
            json={**signature, "webhook_id": settings.PAYPAL_WEBHOOK_ID, "webhook_event": event},
            level=logging.DEBUG,
        )

        if body.get("verification_status") != "SUCCESS":
            raise PayPalWebhookVerificationError(
                "Invalid webhook signature",
                details={"verification_status": body.get("verification_status")},
            )

    # =========================================================================
    # HTTP
    # =========================================================================

    @classmethod
    def _request(
        cls,
        method: str,
        path: str,
        log_context: dict[str, Any],
        json: dict[str, Any] | None = None,
        request_id: str | None = None,
        level: int = logging.INFO,
    ) -> dict[str, Any]:
        """Authenticated JSON call."""
        headers = {
            "Authorization": f"Bearer {cls.get_access_token()}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        if request_id:
            headers["PayPal-Request-Id"] = request_id
        return cls._send(method, path, log_context, headers=headers, json=json, level=level)

    @classmethod
    def _send(
        cls,
        method: str,
        path: str,
        log_context: dict[str, Any],
        level: int = logging.INFO,
        **kwargs,
    ) -> dict[str, Any]:
        logger = cls.get_logger()
        start_time = time.time()
        logger.log(level, "Starting PayPal operation", extra=log_context)

        try:
            response = requests.request(
                method,
                f"{cls._base_url()}{path}",
                timeout=cls._timeout(),
                **kwargs,
            )
        except requests.exceptions.Timeout:
            logger.error("PayPal request timed out", extra=log_context)
            raise PayPalTimeoutError("PayPal request timed out. Please retry.")
        except requests.exceptions.RequestException as e:
            logger.error("Connection error to PayPal", extra=log_context, exc_info=True)
            raise PayPalAPIUnavailableError(
                "Could not connect to PayPal. Please retry.",
                details={"error": str(e)},
            )

        duration_ms = (time.time() - start_time) * 1000
        if response.status_code >= 400:
            cls._handle_http_error(response, {**log_context, "duration_ms": duration_ms})

        logger.log(
            level,
            "PayPal operation completed",
            extra={**log_context, "status_code": response.status_code, "duration_ms": duration_ms},
        )
        if not response.content:
            return {}
        return response.json()

    @classmethod
    def _handle_http_error(cls, response: requests.Response, log_context: dict[str, Any]) -> None:
        """
        Translate a PayPal error response to a domain exception.

        Raises:
            PayPalAuthenticationError: 401
            PayPalOrderAlreadyCapturedError: 422 ORDER_ALREADY_CAPTURED
            PayPalUnprocessableError: other 422s
            PayPalRateLimitError: 429
            PayPalAPIUnavailableError: 5xx
            PayPalInvalidRequestError: other 4xx
        """
        logger = cls.get_logger()
        try:
            body = response.json()
        except ValueError:
            body = {}

        details = body.get("details") or [{}]
        issue = details[0].get("issue") or body.get("name") or body.get("error")
        message = body.get("message") or body.get("error_description") or f"PayPal returned {response.status_code}"
        error_kwargs = {
            "paypal_issue": issue,
            "debug_id": body.get("debug_id"),
            "status_code": response.status_code,
        }
        log_context = {**log_context, "status_code": response.status_code, "paypal_issue": issue}

        status_code = response.status_code
        if status_code == 401:
            logger.critical("PayPal authentication failed - check client credentials", extra=log_context)
            cache.delete(ACCESS_TOKEN_CACHE_KEY)
            raise PayPalAuthenticationError("PayPal authentication failed", **error_kwargs)

        if status_code == 422:
            if issue == "ORDER_ALREADY_CAPTURED":
                logger.info("PayPal order already captured", extra=log_context)
                raise PayPalOrderAlreadyCapturedError(message, **error_kwargs)
            logger.warning("PayPal rejected the request", extra=log_context)
            raise PayPalUnprocessableError(message, **error_kwargs)

        if status_code == 429:
            logger.warning("Rate limited by PayPal", extra=log_context)
            raise PayPalRateLimitError("PayPal rate limit exceeded. Please retry.", **error_kwargs)

        if status_code >= 500:
            logger.error("PayPal API error", extra=log_context)
            raise PayPalAPIUnavailableError("PayPal service error. Please retry.", **error_kwargs)

        logger.error("Invalid request to PayPal", extra=log_context)
        raise PayPalInvalidRequestError(message, **error_kwargs)
