"""
Tests for the webhook handler registry and the Stripe/PayPal handlers.

Handlers run against the real ReconciliationService (with mock adapters),
so these tests check the payload parsing and the resulting row state.
"""

from decimal import Decimal

import pytest

from commissions.state_machines import EscrowStatus
from payments.state_machines import PaymentProvider, TransactionStatus
from payments.tests.factories import PaymentTransactionFactory, WebhookEventFactory
from payments.webhooks.handlers import WEBHOOK_HANDLERS, dispatch_webhook


def stripe_event(event_type: str, obj: dict):
    return WebhookEventFactory(
        provider=PaymentProvider.STRIPE,
        event_type=event_type,
        payload={"id": "evt_1", "type": event_type, "data": {"object": obj}},
    )


def paypal_event(event_type: str, resource: dict):
    return WebhookEventFactory(
        provider=PaymentProvider.PAYPAL,
        provider_event_id="WH-EVENT-1",
        event_type=event_type,
        payload={"id": "WH-EVENT-1", "event_type": event_type, "resource": resource},
    )


@pytest.fixture
def paypal_txn(priced_commission):
    return PaymentTransactionFactory(
        commission=priced_commission,
        provider=PaymentProvider.PAYPAL,
        provider_order_id="ORDER-9",
        currency="USD",
    )


class TestRegistry:
    def test_handlers_registered_per_provider(self):
        assert (PaymentProvider.STRIPE, "payment_intent.succeeded") in WEBHOOK_HANDLERS
        assert (PaymentProvider.PAYPAL, "PAYMENT.CAPTURE.COMPLETED") in WEBHOOK_HANDLERS
        assert (PaymentProvider.PAYPAL, "payment_intent.succeeded") not in WEBHOOK_HANDLERS

    @pytest.mark.django_db
    def test_unknown_event_type_is_acknowledged(self, reconciliation):
        event = stripe_event("customer.created", {"id": "cus_1"})

        result = dispatch_webhook(event, reconciliation)

        assert result.success
        assert result.data is None


@pytest.mark.django_db
class TestStripeHandlers:
    def test_payment_succeeded(self, reconciliation, priced_commission, reload):
        txn = PaymentTransactionFactory(commission=priced_commission, provider_order_id="pi_ok")
        event = stripe_event(
            "payment_intent.succeeded",
            {"id": "pi_ok", "object": "payment_intent", "latest_charge": "ch_ok", "status": "succeeded"},
        )

        result = dispatch_webhook(event, reconciliation)

        assert result.success
        stored = reload(txn)
        assert stored.status == TransactionStatus.SUCCEEDED
        assert stored.provider_capture_id == "ch_ok"
        assert reload(priced_commission).escrow_status == EscrowStatus.HELD

    def test_payment_succeeded_for_unknown_intent(self, reconciliation):
        event = stripe_event("payment_intent.succeeded", {"id": "pi_unknown"})

        result = dispatch_webhook(event, reconciliation)

        assert result.error_code == "TRANSACTION_NOT_FOUND"

    def test_payment_failed_records_reason(self, reconciliation, priced_commission, reload):
        txn = PaymentTransactionFactory(commission=priced_commission, provider_order_id="pi_bad")
        event = stripe_event(
            "payment_intent.payment_failed",
            {"id": "pi_bad", "last_payment_error": {"message": "Your card has insufficient funds."}},
        )

        dispatch_webhook(event, reconciliation)

        stored = reload(txn)
        assert stored.status == TransactionStatus.FAILED
        assert stored.failure_reason == "Your card has insufficient funds."

    def test_full_charge_refund(self, reconciliation, priced_commission, reload):
        txn = PaymentTransactionFactory(
            commission=priced_commission,
            provider_order_id="pi_refund",
            status=TransactionStatus.SUCCEEDED,
        )
        event = stripe_event(
            "charge.refunded",
            {"id": "ch_refund", "payment_intent": "pi_refund", "refunded": True, "amount_refunded": 20000},
        )

        result = dispatch_webhook(event, reconciliation)

        assert result.success
        assert reload(txn).status == TransactionStatus.REFUNDED

    def test_partial_refund_is_ignored(self, reconciliation, priced_commission, reload):
        txn = PaymentTransactionFactory(
            commission=priced_commission,
            provider_order_id="pi_partial",
            status=TransactionStatus.SUCCEEDED,
        )
        event = stripe_event(
            "charge.refunded",
            {"id": "ch_partial", "payment_intent": "pi_partial", "refunded": False, "amount_refunded": 500},
        )

        result = dispatch_webhook(event, reconciliation)

        assert result.success
        assert reload(txn).status == TransactionStatus.SUCCEEDED

    def test_missing_object_id(self, reconciliation):
        event = stripe_event("payment_intent.succeeded", {})

        result = dispatch_webhook(event, reconciliation)

        assert result.error_code == "INVALID_WEBHOOK_PAYLOAD"


@pytest.mark.django_db
class TestPayPalHandlers:
    def test_capture_completed(self, reconciliation, paypal_txn, reload):
        event = paypal_event(
            "PAYMENT.CAPTURE.COMPLETED",
            {
                "id": "CAPTURE-9",
                "status": "COMPLETED",
                "amount": {"currency_code": "USD", "value": "200.00"},
                "supplementary_data": {"related_ids": {"order_id": "ORDER-9"}},
            },
        )

        result = dispatch_webhook(event, reconciliation)

        assert result.success
        stored = reload(paypal_txn)
        assert stored.status == TransactionStatus.SUCCEEDED
        assert stored.provider_capture_id == "CAPTURE-9"
        assert stored.amount == Decimal("200.00")

    def test_capture_completed_without_order_id(self, reconciliation, paypal_txn, reload):
        event = paypal_event("PAYMENT.CAPTURE.COMPLETED", {"id": "CAPTURE-9", "status": "COMPLETED"})

        result = dispatch_webhook(event, reconciliation)

        assert result.error_code == "INVALID_WEBHOOK_PAYLOAD"
        assert reload(paypal_txn).status == TransactionStatus.PENDING

    def test_capture_denied(self, reconciliation, paypal_txn, reload):
        event = paypal_event(
            "PAYMENT.CAPTURE.DENIED",
            {
                "id": "CAPTURE-9",
                "status": "DECLINED",
                "supplementary_data": {"related_ids": {"order_id": "ORDER-9"}},
            },
        )

        dispatch_webhook(event, reconciliation)

        assert reload(paypal_txn).status == TransactionStatus.FAILED

    def test_capture_refunded_via_up_link(self, reconciliation, priced_commission, reload):
        txn = PaymentTransactionFactory(
            commission=priced_commission,
            provider=PaymentProvider.PAYPAL,
            provider_order_id="ORDER-10",
            provider_capture_id="CAPTURE-10",
            status=TransactionStatus.SUCCEEDED,
        )
        event = paypal_event(
            "PAYMENT.CAPTURE.REFUNDED",
            {
                "id": "REFUND-1",
                "status": "COMPLETED",
                "links": [
                    {"rel": "self", "href": "https://api-m.paypal.com/v2/payments/refunds/REFUND-1"},
                    {"rel": "up", "href": "https://api-m.paypal.com/v2/payments/captures/CAPTURE-10"},
                ],
            },
        )

        result = dispatch_webhook(event, reconciliation)

        assert result.success
        assert reload(txn).status == TransactionStatus.REFUNDED
        assert reload(priced_commission).escrow_status == EscrowStatus.REFUNDED
