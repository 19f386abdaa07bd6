"""
Tests for the Stripe and PayPal webhook views.

Tests cover:
- Signature verification (a real Stripe-Signature header, PayPal verify API)
- WebhookEvent creation and idempotency
- Status codes for applied, duplicate, unknown and failed events
"""

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
from django.test import RequestFactory

from payments.exceptions import PayPalAPIUnavailableError, PayPalWebhookVerificationError
from payments.models import WebhookEvent
from payments.state_machines import PaymentProvider, TransactionStatus, WebhookEventStatus
from payments.tests.factories import PaymentTransactionFactory
from payments.webhooks.views import paypal_webhook, stripe_webhook

WEBHOOK_SECRET = "whsec_test_secret"


# =============================================================================
# Setup
# =============================================================================


@pytest.fixture
def rf():
    return RequestFactory()


@pytest.fixture(autouse=True)
def webhook_secret(settings):
    settings.STRIPE_WEBHOOK_SECRET = WEBHOOK_SECRET


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe does."""
    timestamp = timestamp or int(time.time())
    digest = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def stripe_request(rf, event: dict, signature: str | bool | None = None):
    body = json.dumps(event)
    headers = {}
    if signature is not False:
        headers["HTTP_STRIPE_SIGNATURE"] = signature or sign(body)
    return rf.post(
        "/api/v1/payments/webhooks/stripe/",
        data=body,
        content_type="application/json",
        **headers,
    )


def paypal_request(rf, event: dict | str):
    body = event if isinstance(event, str) else json.dumps(event)
    return rf.post(
        "/api/v1/payments/webhooks/paypal/",
        data=body,
        content_type="application/json",
        HTTP_PAYPAL_TRANSMISSION_ID="tx-1",
        HTTP_PAYPAL_TRANSMISSION_TIME="2026-10-17T10:00:00Z",
        HTTP_PAYPAL_TRANSMISSION_SIG="sig",
        HTTP_PAYPAL_CERT_URL="https://api.paypal.com/cert",
        HTTP_PAYPAL_AUTH_ALGO="SHA256withRSA",
    )


def succeeded_event(intent_id: str, event_id: str = "evt_succeeded_1") -> dict:
    return {
        "id": event_id,
        "object": "event",
        "type": "payment_intent.succeeded",
        "data": {"object": {"id": intent_id, "object": "payment_intent", "latest_charge": "ch_1"}},
    }


# =============================================================================
# Stripe
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookSignature:
    def test_missing_signature_returns_400(self, rf):
        response = stripe_webhook(stripe_request(rf, succeeded_event("pi_1"), signature=False))

        assert response.status_code == 400
        assert b"Missing signature" in response.content

    def test_wrong_secret_returns_400(self, rf):
        event = succeeded_event("pi_1")
        signature = sign(json.dumps(event), secret="whsec_someone_else")

        response = stripe_webhook(stripe_request(rf, event, signature=signature))

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    def test_stale_timestamp_returns_400(self, rf):
        event = succeeded_event("pi_1")
        signature = sign(json.dumps(event), timestamp=int(time.time()) - 3600)

        response = stripe_webhook(stripe_request(rf, event, signature=signature))

        assert response.status_code == 400


@pytest.mark.django_db
class TestStripeWebhookProcessing:
    def test_succeeded_event_confirms_payment(self, rf, priced_commission, reload):
        txn = PaymentTransactionFactory(commission=priced_commission, provider_order_id="pi_hook")

        response = stripe_webhook(stripe_request(rf, succeeded_event("pi_hook")))

        assert response.status_code == 200
        assert reload(txn).status == TransactionStatus.SUCCEEDED
        webhook_event = WebhookEvent.objects.get(provider_event_id="evt_succeeded_1")
        assert webhook_event.provider == PaymentProvider.STRIPE
        assert webhook_event.status == WebhookEventStatus.PROCESSED

    def test_redelivery_is_acknowledged_without_reprocessing(self, rf, priced_commission, reload):
        PaymentTransactionFactory(commission=priced_commission, provider_order_id="pi_hook")
        stripe_webhook(stripe_request(rf, succeeded_event("pi_hook")))
        version = reload(priced_commission).version

        response = stripe_webhook(stripe_request(rf, succeeded_event("pi_hook")))

        assert response.status_code == 200
        assert b"Already processed" in response.content
        assert WebhookEvent.objects.count() == 1
        assert reload(priced_commission).version == version

    def test_unknown_event_type_returns_200(self, rf):
        event = {"id": "evt_other", "type": "customer.created", "data": {"object": {"id": "cus_1"}}}

        response = stripe_webhook(stripe_request(rf, event))

        assert response.status_code == 200
        assert WebhookEvent.objects.get(provider_event_id="evt_other").is_processed

    def test_event_for_unknown_payment_returns_200(self, rf):
        response = stripe_webhook(stripe_request(rf, succeeded_event("pi_not_ours")))

        assert response.status_code == 200

    def test_handler_error_returns_500_and_allows_retry(self, rf, priced_commission):
        PaymentTransactionFactory(commission=priced_commission, provider_order_id="pi_hook")

        with patch(
            "payments.services.reconciliation_service.ReconciliationService.confirm_success",
            side_effect=RuntimeError("database is locked"),
        ):
            response = stripe_webhook(stripe_request(rf, succeeded_event("pi_hook")))

        assert response.status_code == 500
        webhook_event = WebhookEvent.objects.get(provider_event_id="evt_succeeded_1")
        assert webhook_event.status == WebhookEventStatus.FAILED
        assert "database is locked" in webhook_event.error_message

        response = stripe_webhook(stripe_request(rf, succeeded_event("pi_hook")))

        assert response.status_code == 200
        assert WebhookEvent.objects.get(provider_event_id="evt_succeeded_1").retry_count == 2

    def test_malformed_event_returns_400_without_retry(self, rf, priced_commission, reload):
        txn = PaymentTransactionFactory(commission=priced_commission, provider_order_id="pi_hook")
        event = succeeded_event("pi_hook", event_id="evt_no_object_id")
        del event["data"]["object"]["id"]

        response = stripe_webhook(stripe_request(rf, event))

        assert response.status_code == 400
        webhook_event = WebhookEvent.objects.get(provider_event_id="evt_no_object_id")
        assert webhook_event.status == WebhookEventStatus.FAILED
        assert "data.object.id" in webhook_event.error_message
        assert reload(txn).status == TransactionStatus.PENDING


# =============================================================================
# PayPal
# =============================================================================


def capture_completed_event(order_id: str) -> dict:
    return {
        "id": "WH-58D329510W468432D-8HN650336L201105X",
        "event_type": "PAYMENT.CAPTURE.COMPLETED",
        "resource": {
            "id": "CAPTURE-77",
            "status": "COMPLETED",
            "supplementary_data": {"related_ids": {"order_id": order_id}},
        },
    }


@pytest.mark.django_db
class TestPayPalWebhook:
    def test_verified_capture_confirms_payment(self, rf, priced_commission, reload):
        txn = PaymentTransactionFactory(
            commission=priced_commission,
            provider=PaymentProvider.PAYPAL,
            provider_order_id="ORDER-77",
        )

        with patch("payments.webhooks.views.PayPalAdapter.verify_webhook_signature") as mock_verify:
            response = paypal_webhook(paypal_request(rf, capture_completed_event("ORDER-77")))

        assert response.status_code == 200
        mock_verify.assert_called_once()
        stored = reload(txn)
        assert stored.status == TransactionStatus.SUCCEEDED
        assert stored.provider_capture_id == "CAPTURE-77"

    def test_rejected_signature_returns_400(self, rf):
        with patch(
            "payments.webhooks.views.PayPalAdapter.verify_webhook_signature",
            side_effect=PayPalWebhookVerificationError("Invalid webhook signature"),
        ):
            response = paypal_webhook(paypal_request(rf, capture_completed_event("ORDER-77")))

        assert response.status_code == 400
        assert not WebhookEvent.objects.exists()

    def test_verification_unavailable_returns_503(self, rf):
        with patch(
            "payments.webhooks.views.PayPalAdapter.verify_webhook_signature",
            side_effect=PayPalAPIUnavailableError("PayPal is down"),
        ):
            response = paypal_webhook(paypal_request(rf, capture_completed_event("ORDER-77")))

        assert response.status_code == 503

    def test_invalid_json_returns_400(self, rf):
        response = paypal_webhook(paypal_request(rf, "{not json"))

        assert response.status_code == 400
