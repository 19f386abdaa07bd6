"""
Pytest fixtures for the Stripe and PayPal adapter tests.

Sections:
    - Test Data Fixtures
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Mock Stripe Client Fixtures
    - PayPal Fixtures
"""

import json
import uuid
from dataclasses import dataclass
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import stripe
from django.core.cache import cache

from payments.adapters.paypal_adapter import ACCESS_TOKEN_CACHE_KEY


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def transaction_id():
    return uuid.uuid4()


@pytest.fixture
def trace_id():
    """Generate a trace ID for testing."""
    return f"trace-{uuid.uuid4().hex[:16]}"


@pytest.fixture
def idempotency_key():
    return f"test-{uuid.uuid4()}"


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@pytest.fixture
def mock_payment_intent():
    """Create a mock PaymentIntent response."""

    def _create(
        id: str = "pi_test123456",
        status: str = "requires_payment_method",
        amount: int = 20000,
        currency: str = "usd",
        client_secret: str = "pi_test123456_secret_abc123",
        latest_charge: str | None = None,
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "payment_intent",
                "status": status,
                "amount": amount,
                "currency": currency,
                "client_secret": client_secret,
                "latest_charge": latest_charge,
                "metadata": metadata or {},
            }
        )

    return _create


@pytest.fixture
def mock_transfer():
    """Create a mock Transfer response."""

    def _create(
        id: str = "tr_test123456",
        amount: int = 18000,
        currency: str = "usd",
        destination: str = "acct_dest123",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "transfer",
                "amount": amount,
                "currency": currency,
                "destination": destination,
                "metadata": metadata or {},
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(message=message, param=None, code=code)
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such payment_intent: 'pi_missing'",
        param: str | None = "intent",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(message=message, param=param, code=code)

    return _create


@pytest.fixture
def rate_limit_error():
    return stripe.RateLimitError(message="Too many requests hit the API too quickly.")


@pytest.fixture
def api_connection_error():
    return stripe.APIConnectionError(message="Could not connect to Stripe.")


@pytest.fixture
def api_error():
    return stripe.APIError(message="Something went wrong on Stripe's end.")


@pytest.fixture
def authentication_error():
    return stripe.AuthenticationError(message="Invalid API Key provided.")


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_payment_intent(mock_payment_intent):
    """Mock stripe.PaymentIntent API."""
    with patch("stripe.PaymentIntent") as mock:
        mock.create.return_value = mock_payment_intent()
        mock.capture.return_value = mock_payment_intent(status="succeeded", latest_charge="ch_test123")
        mock.retrieve.return_value = mock_payment_intent()
        yield mock


@pytest.fixture
def mock_stripe_transfer(mock_transfer):
    """Mock stripe.Transfer API."""
    with patch("stripe.Transfer") as mock:
        mock.create.return_value = mock_transfer()
        yield mock


@pytest.fixture
def mock_stripe_webhook():
    """Mock stripe.Webhook API."""
    with patch("stripe.Webhook") as mock:
        mock.construct_event.return_value = MockStripeObject(
            {
                "id": "evt_test123",
                "type": "payment_intent.succeeded",
                "data": {"object": {"id": "pi_test123", "object": "payment_intent"}},
            }
        )
        yield mock


@pytest.fixture
def mock_stripe_http_client():
    """Mock stripe.RequestsClient so no real HTTP client is built."""
    with patch("stripe.RequestsClient") as mock:
        yield mock


# =============================================================================
# PayPal Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def paypal_settings(settings):
    settings.PAYPAL_CLIENT_ID = "paypal-client-id"
    settings.PAYPAL_CLIENT_SECRET = "paypal-client-secret"
    settings.PAYPAL_API_BASE = "https://api-m.sandbox.paypal.com"
    settings.PAYPAL_WEBHOOK_ID = "WH-TEST-ID"
    settings.PAYPAL_API_TIMEOUT_SECONDS = 10
    settings.PAYPAL_RETURN_URL = "https://app.example.com/payments/paypal/return"
    settings.PAYPAL_CANCEL_URL = "https://app.example.com/payments/paypal/cancel"


@pytest.fixture
def paypal_response():
    """Build a fake requests.Response for PayPal."""

    def _create(status_code: int = 200, body: dict | None = None) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.content = json.dumps(body).encode() if body is not None else b""
        if body is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = body
        return response

    return _create


@pytest.fixture
def paypal_token():
    """Seed the cached OAuth token so calls skip the token request."""
    cache.set(ACCESS_TOKEN_CACHE_KEY, "A21AAtest-token")
    yield "A21AAtest-token"
    cache.delete(ACCESS_TOKEN_CACHE_KEY)


@pytest.fixture
def mock_paypal_request(paypal_response):
    """Patch requests.request; defaults to an empty 200 body."""
    with patch("payments.adapters.paypal_adapter.requests.request") as mock:
        mock.return_value = paypal_response(200, {})
        yield mock


@pytest.fixture
def paypal_order_body():
    """Orders v2 body for a freshly created order."""

    def _create(order_id: str = "5O190127TN364715T", status: str = "CREATED") -> dict:
        return {
            "id": order_id,
            "status": status,
            "links": [
                {"href": f"https://api-m.sandbox.paypal.com/v2/checkout/orders/{order_id}", "rel": "self"},
                {"href": f"https://www.sandbox.paypal.com/checkoutnow?token={order_id}", "rel": "approve"},
                {"href": f"https://api-m.sandbox.paypal.com/v2/checkout/orders/{order_id}/capture", "rel": "capture"},
            ],
        }

    return _create


@pytest.fixture
def paypal_capture_body():
    """Orders v2 body returned by a capture call."""

    def _create(
        order_id: str = "5O190127TN364715T",
        capture_id: str = "3C679366HH908993F",
        capture_status: str = "COMPLETED",
        custom_id: str = "commission|deposit",
    ) -> dict:
        return {
            "id": order_id,
            "status": "COMPLETED",
            "purchase_units": [
                {
                    "reference_id": "default",
                    "payments": {
                        "captures": [
                            {
                                "id": capture_id,
                                "status": capture_status,
                                "custom_id": custom_id,
                                "amount": {"currency_code": "USD", "value": "200.00"},
                            }
                        ]
                    },
                }
            ],
        }

    return _create
