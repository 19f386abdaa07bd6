"""
Tests for PayPal adapter.

Tests cover:
- OAuth token retrieval and caching
- Order creation, lookup and capture
- Webhook signature verification
- HTTP error translation
"""

from decimal import Decimal

import pytest
import requests
from django.core.cache import cache

from payments.adapters import CreateOrderParams, PayPalAdapter
from payments.adapters.paypal_adapter import ACCESS_TOKEN_CACHE_KEY
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

API_BASE = "https://api-m.sandbox.paypal.com"

SIGNATURE_HEADERS = {
    "PAYPAL-AUTH-ALGO": "SHA256withRSA",
    "PAYPAL-CERT-URL": "https://api.paypal.com/v1/notifications/certs/CERT-360caa42",
    "PAYPAL-TRANSMISSION-ID": "69cd13f0-d67a-11e5-baa3-778b53f4ae55",
    "PAYPAL-TRANSMISSION-SIG": "lmI95Jx3Y9nhR5SJWlHVIWpg4AgFk7n9bCHSRxbrd8A9zrhdu2rMyFrmz+Zjh3s3boXB07VXCXUZy/UFzUlnGJn0wDugt7FlSvdKeIJenLRemUxYCPVoEZzg9VFNqOa48gMkvF+XTpxBeUx/kWy6B5cp7GkT2+pOowfRK7OaynuxUoKW3JcMWw272VKjLTtTAShncla7tGF+55rxyt2KNZIIqxNMJ48RDZheGU5w1npu9dZHnPgTXB9iomeVRoD8O/jhRpnKsGrDschyNdkeh81BJJMH4Ctc6lnCCquoP/GzCzz33MMsNdid7vL/NIWaCsekQpW26FpWPi/tfj8nLA==",
    "PAYPAL-TRANSMISSION-TIME": "2026-10-17T10:00:00Z",
}


def order_params(**overrides) -> CreateOrderParams:
    values = {
        "amount": Decimal("200.00"),
        "currency": "usd",
        "custom_id": "commission|deposit",
        "reference_id": "commission",
        "description": "Commission Payment - deposit",
        "request_id": "create_order:txn:1:abcd1234",
    }
    values.update(overrides)
    return CreateOrderParams(**values)


# =============================================================================
# CreateOrderParams Tests
# =============================================================================


class TestCreateOrderParams:
    def test_amount_must_be_positive(self):
        with pytest.raises(ValueError, match="amount must be positive"):
            order_params(amount=Decimal("0"))

    def test_custom_id_length_limit(self):
        with pytest.raises(ValueError, match="custom_id"):
            order_params(custom_id="x" * 128)

    def test_request_id_required(self):
        with pytest.raises(ValueError, match="request_id is required"):
            order_params(request_id="")


# =============================================================================
# Access Token Tests
# =============================================================================


class TestPayPalAccessToken:
    @pytest.fixture(autouse=True)
    def clear_token(self):
        cache.delete(ACCESS_TOKEN_CACHE_KEY)
        yield
        cache.delete(ACCESS_TOKEN_CACHE_KEY)

    def test_fetches_and_caches_token(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(
            200,
            {"access_token": "A21AAfresh", "token_type": "Bearer", "expires_in": 32400},
        )

        first = PayPalAdapter.get_access_token()
        second = PayPalAdapter.get_access_token()

        assert first == second == "A21AAfresh"
        mock_paypal_request.assert_called_once()
        args, kwargs = mock_paypal_request.call_args
        assert args == ("POST", f"{API_BASE}/v1/oauth2/token")
        assert kwargs["auth"] == ("paypal-client-id", "paypal-client-secret")
        assert kwargs["data"] == {"grant_type": "client_credentials"}
        assert kwargs["timeout"] == 10

    def test_rejected_credentials(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(
            401,
            {"error": "invalid_client", "error_description": "Client Authentication failed"},
        )

        with pytest.raises(PayPalAuthenticationError):
            PayPalAdapter.get_access_token()

        assert cache.get(ACCESS_TOKEN_CACHE_KEY) is None


# =============================================================================
# Order Tests
# =============================================================================


@pytest.mark.usefixtures("paypal_token")
class TestPayPalOrders:
    def test_create_order(self, mock_paypal_request, paypal_response, paypal_order_body, trace_id):
        mock_paypal_request.return_value = paypal_response(201, paypal_order_body())

        result = PayPalAdapter.create_order(order_params(), trace_id=trace_id)

        assert result.id == "5O190127TN364715T"
        assert result.status == "CREATED"
        assert result.approval_url == "https://www.sandbox.paypal.com/checkoutnow?token=5O190127TN364715T"

        args, kwargs = mock_paypal_request.call_args
        assert args == ("POST", f"{API_BASE}/v2/checkout/orders")
        assert kwargs["headers"]["Authorization"] == "Bearer A21AAtest-token"
        assert kwargs["headers"]["PayPal-Request-Id"] == "create_order:txn:1:abcd1234"
        unit = kwargs["json"]["purchase_units"][0]
        assert kwargs["json"]["intent"] == "CAPTURE"
        assert unit["custom_id"] == "commission|deposit"
        assert unit["amount"] == {"currency_code": "USD", "value": "200.00"}
        assert kwargs["json"]["application_context"]["return_url"].endswith("/paypal/return")

    def test_create_order_uses_payer_action_link(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(
            200,
            {
                "id": "ORDER-2",
                "status": "PAYER_ACTION_REQUIRED",
                "links": [{"href": "https://www.paypal.com/checkoutnow?token=ORDER-2", "rel": "payer-action"}],
            },
        )

        result = PayPalAdapter.create_order(order_params())

        assert result.approval_url == "https://www.paypal.com/checkoutnow?token=ORDER-2"

    def test_capture_order(self, mock_paypal_request, paypal_response, paypal_capture_body):
        mock_paypal_request.return_value = paypal_response(201, paypal_capture_body())

        result = PayPalAdapter.capture_order("5O190127TN364715T", request_id="capture-key")

        assert result.completed
        assert result.capture_id == "3C679366HH908993F"
        assert result.custom_id == "commission|deposit"
        args, kwargs = mock_paypal_request.call_args
        assert args == ("POST", f"{API_BASE}/v2/checkout/orders/5O190127TN364715T/capture")
        assert kwargs["headers"]["PayPal-Request-Id"] == "capture-key"

    def test_pending_capture_is_not_completed(self, mock_paypal_request, paypal_response, paypal_capture_body):
        mock_paypal_request.return_value = paypal_response(201, paypal_capture_body(capture_status="PENDING"))

        result = PayPalAdapter.capture_order("5O190127TN364715T", request_id="capture-key")

        assert not result.completed
        assert result.capture_status == "PENDING"

    def test_capture_already_captured(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(
            422,
            {
                "name": "UNPROCESSABLE_ENTITY",
                "details": [{"issue": "ORDER_ALREADY_CAPTURED", "description": "Order already captured."}],
                "message": "The requested action could not be performed.",
                "debug_id": "f8a7e2c1b3d4",
            },
        )

        with pytest.raises(PayPalOrderAlreadyCapturedError) as exc_info:
            PayPalAdapter.capture_order("5O190127TN364715T", request_id="capture-key")

        assert exc_info.value.paypal_issue == "ORDER_ALREADY_CAPTURED"
        assert exc_info.value.debug_id == "f8a7e2c1b3d4"

    def test_get_order_reads_capture_id(self, mock_paypal_request, paypal_response, paypal_capture_body):
        mock_paypal_request.return_value = paypal_response(200, paypal_capture_body(capture_id="CAPTURE-EARLIER"))

        result = PayPalAdapter.get_order("5O190127TN364715T")

        assert result.status == "COMPLETED"
        assert result.capture_id == "CAPTURE-EARLIER"
        args, _ = mock_paypal_request.call_args
        assert args == ("GET", f"{API_BASE}/v2/checkout/orders/5O190127TN364715T")


# =============================================================================
# Webhook Verification Tests
# =============================================================================


@pytest.mark.usefixtures("paypal_token")
class TestPayPalWebhookVerification:
    EVENT = {"id": "WH-1", "event_type": "PAYMENT.CAPTURE.COMPLETED", "resource": {"id": "CAPTURE-1"}}

    def test_verified(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(200, {"verification_status": "SUCCESS"})

        PayPalAdapter.verify_webhook_signature(SIGNATURE_HEADERS, self.EVENT)

        args, kwargs = mock_paypal_request.call_args
        assert args == ("POST", f"{API_BASE}/v1/notifications/verify-webhook-signature")
        assert kwargs["json"]["webhook_id"] == "WH-TEST-ID"
        assert kwargs["json"]["transmission_id"] == SIGNATURE_HEADERS["PAYPAL-TRANSMISSION-ID"]
        assert kwargs["json"]["webhook_event"] == self.EVENT

    def test_rejected(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(200, {"verification_status": "FAILURE"})

        with pytest.raises(PayPalWebhookVerificationError):
            PayPalAdapter.verify_webhook_signature(SIGNATURE_HEADERS, self.EVENT)

    def test_missing_headers(self, mock_paypal_request):
        headers = {k: v for k, v in SIGNATURE_HEADERS.items() if k != "PAYPAL-TRANSMISSION-SIG"}

        with pytest.raises(PayPalWebhookVerificationError) as exc_info:
            PayPalAdapter.verify_webhook_signature(headers, self.EVENT)

        assert exc_info.value.details["missing_headers"] == ["PAYPAL-TRANSMISSION-SIG"]
        mock_paypal_request.assert_not_called()

    def test_unconfigured_webhook_id(self, mock_paypal_request, settings):
        settings.PAYPAL_WEBHOOK_ID = ""

        with pytest.raises(PayPalWebhookVerificationError):
            PayPalAdapter.verify_webhook_signature(SIGNATURE_HEADERS, self.EVENT)

        mock_paypal_request.assert_not_called()


# =============================================================================
# Error Translation Tests
# =============================================================================


@pytest.mark.usefixtures("paypal_token")
class TestPayPalErrorTranslation:
    @pytest.mark.parametrize(
        "status_code, body, error_class",
        [
            (
                422,
                {"name": "UNPROCESSABLE_ENTITY", "details": [{"issue": "INSTRUMENT_DECLINED"}]},
                PayPalUnprocessableError,
            ),
            (429, {"name": "RATE_LIMIT_REACHED"}, PayPalRateLimitError),
            (500, {"name": "INTERNAL_SERVER_ERROR"}, PayPalAPIUnavailableError),
            (503, None, PayPalAPIUnavailableError),
            (400, {"name": "INVALID_REQUEST", "message": "Request is not well-formed"}, PayPalInvalidRequestError),
            (404, {"name": "RESOURCE_NOT_FOUND"}, PayPalInvalidRequestError),
        ],
    )
    def test_status_mapping(self, mock_paypal_request, paypal_response, status_code, body, error_class):
        mock_paypal_request.return_value = paypal_response(status_code, body)

        with pytest.raises(error_class) as exc_info:
            PayPalAdapter.get_order("ORDER-1")

        assert exc_info.value.status_code == status_code

    def test_declined_issue_is_kept(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(
            422,
            {"name": "UNPROCESSABLE_ENTITY", "details": [{"issue": "INSTRUMENT_DECLINED"}]},
        )

        with pytest.raises(PayPalUnprocessableError) as exc_info:
            PayPalAdapter.capture_order("ORDER-1", request_id="capture-key")

        assert exc_info.value.paypal_issue == "INSTRUMENT_DECLINED"
        assert not isinstance(exc_info.value, PayPalOrderAlreadyCapturedError)

    def test_unauthorized_drops_cached_token(self, mock_paypal_request, paypal_response):
        mock_paypal_request.return_value = paypal_response(401, {"error": "invalid_token"})

        with pytest.raises(PayPalAuthenticationError):
            PayPalAdapter.get_order("ORDER-1")

        assert cache.get(ACCESS_TOKEN_CACHE_KEY) is None

    def test_timeout(self, mock_paypal_request):
        mock_paypal_request.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(PayPalTimeoutError) as exc_info:
            PayPalAdapter.get_order("ORDER-1")

        assert exc_info.value.is_retryable is True

    def test_connection_error(self, mock_paypal_request):
        mock_paypal_request.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(PayPalAPIUnavailableError):
            PayPalAdapter.get_order("ORDER-1")
