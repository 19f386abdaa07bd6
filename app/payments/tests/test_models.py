"""
Tests for payment domain models.

Tests constraints, FSM transitions and helpers on PaymentTransaction,
PayoutAccount and WebhookEvent.
"""

import pytest
from django.db import IntegrityError
from django_fsm import TransitionNotAllowed

from payments.models import PaymentTransaction
from payments.state_machines import (
    OnboardingStatus,
    PaymentProvider,
    TransactionStatus,
    WebhookEventStatus,
)
from payments.tests.factories import (
    PaymentTransactionFactory,
    PayoutAccountFactory,
    WebhookEventFactory,
)


# =============================================================================
# PaymentTransaction Tests
# =============================================================================


@pytest.mark.django_db
class TestPaymentTransactionModel:
    def test_defaults(self):
        txn = PaymentTransactionFactory()

        assert txn.status == TransactionStatus.PENDING
        assert txn.processed_at is None
        assert txn.is_transferred is False

    def test_provider_order_id_unique_per_provider(self):
        PaymentTransactionFactory(provider_order_id="pi_dup")

        with pytest.raises(IntegrityError):
            PaymentTransactionFactory(provider_order_id="pi_dup")

    def test_same_order_id_on_other_provider_allowed(self):
        PaymentTransactionFactory(provider_order_id="SHARED-1")
        PaymentTransactionFactory(provider_order_id="SHARED-1", provider=PaymentProvider.PAYPAL)

        assert PaymentTransaction.objects.filter(provider_order_id="SHARED-1").count() == 2

    def test_unopened_rows_do_not_collide(self):
        PaymentTransactionFactory(provider_order_id=None)
        PaymentTransactionFactory(provider_order_id=None)

        assert PaymentTransaction.objects.filter(provider_order_id__isnull=True).count() == 2

    def test_fail_records_reason(self):
        txn = PaymentTransactionFactory()

        txn.fail(reason="card_declined")
        txn.save()

        stored = PaymentTransaction.objects.get(pk=txn.pk)
        assert stored.status == TransactionStatus.FAILED
        assert stored.failed_at is not None
        assert stored.failure_reason == "card_declined"

    def test_refund_requires_success(self):
        txn = PaymentTransactionFactory()

        with pytest.raises(TransitionNotAllowed):
            txn.refund()

    def test_refund_from_succeeded(self):
        txn = PaymentTransactionFactory(status=TransactionStatus.SUCCEEDED)

        txn.refund()
        txn.save()

        assert PaymentTransaction.objects.get(pk=txn.pk).status == TransactionStatus.REFUNDED

    def test_status_is_protected(self):
        txn = PaymentTransactionFactory()

        with pytest.raises(AttributeError):
            txn.status = TransactionStatus.SUCCEEDED


# =============================================================================
# PayoutAccount Tests
# =============================================================================


@pytest.mark.django_db
class TestPayoutAccountModel:
    def test_ready_for_payouts(self):
        assert PayoutAccountFactory().is_ready_for_payouts

    @pytest.mark.parametrize(
        "onboarding_status, payouts_enabled",
        [
            (OnboardingStatus.IN_PROGRESS, True),
            (OnboardingStatus.COMPLETE, False),
            (OnboardingStatus.REJECTED, False),
        ],
    )
    def test_not_ready(self, onboarding_status, payouts_enabled):
        account = PayoutAccountFactory(onboarding_status=onboarding_status, payouts_enabled=payouts_enabled)

        assert not account.is_ready_for_payouts


# =============================================================================
# WebhookEvent Tests
# =============================================================================


@pytest.mark.django_db
class TestWebhookEventModel:
    def test_event_id_unique_per_provider(self):
        WebhookEventFactory(provider_event_id="evt_1")

        with pytest.raises(IntegrityError):
            WebhookEventFactory(provider_event_id="evt_1")

    def test_stripe_object(self):
        event = WebhookEventFactory(payload={"id": "evt_1", "data": {"object": {"id": "pi_1"}}})

        assert event.get_object_id() == "pi_1"

    def test_paypal_resource(self):
        event = WebhookEventFactory(
            provider=PaymentProvider.PAYPAL,
            payload={"id": "WH-1", "resource": {"id": "CAPTURE-1"}},
        )

        assert event.get_object_id() == "CAPTURE-1"

    def test_processing_lifecycle(self):
        event = WebhookEventFactory()

        event.mark_processing()
        event.mark_failed("boom")
        assert event.status == WebhookEventStatus.FAILED
        assert event.retry_count == 1

        event.mark_processing()
        event.mark_processed()
        event.save()

        stored = type(event).objects.get(pk=event.pk)
        assert stored.is_processed
        assert stored.retry_count == 2
        assert stored.error_message is None
