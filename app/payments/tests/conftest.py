"""
Pytest fixtures for payment tests.

Provides mock provider adapters, participants and commissions in the
states the payment services care about.

Usage:
    def test_deposit(builder, priced_commission, client_user):
        result = builder.open_payment(priced_commission.id, client_user, "deposit", "stripe")
        assert result.amount_due == Decimal("200.00")
"""

import uuid
from decimal import Decimal
from typing import Any

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import ArtistFactory, UserFactory
from commissions.state_machines import CommissionStatus, EscrowStatus
from commissions.tests.factories import CommissionFactory, MilestoneFactory
from payments.adapters import CaptureResult, OrderResult, PaymentIntentResult, TransferResult
from payments.services import EscrowService, PaymentIntentBuilder, ReconciliationService
from payments.tests.factories import PayoutAccountFactory


# =============================================================================
# Mock Adapters
# =============================================================================


class MockStripeAdapter:
    """
    Mock Stripe adapter for testing.

    Use the class attributes to customize behavior per test; every call is
    recorded in ``calls`` for assertions.
    """

    # Default responses (can be overridden in tests)
    retrieve_payment_intent_response: PaymentIntentResult = None
    capture_payment_intent_response: PaymentIntentResult = None
    create_payment_intent_side_effect: Exception = None
    capture_payment_intent_side_effect: Exception = None
    # Raised on the Nth transfer (1-based); earlier transfers succeed
    create_transfer_side_effect: Exception = None
    create_transfer_fail_on: int = 1

    # Track calls for assertions
    calls: dict[str, list[Any]] = {}

    @classmethod
    def reset(cls):
        cls.retrieve_payment_intent_response = None
        cls.capture_payment_intent_response = None
        cls.create_payment_intent_side_effect = None
        cls.capture_payment_intent_side_effect = None
        cls.create_transfer_side_effect = None
        cls.create_transfer_fail_on = 1
        cls.calls = {}

    @classmethod
    def _record(cls, name: str, **kwargs) -> None:
        cls.calls.setdefault(name, []).append(kwargs)

    @classmethod
    def create_payment_intent(cls, params, trace_id=None):
        cls._record("create_payment_intent", params=params, trace_id=trace_id)
        if cls.create_payment_intent_side_effect:
            raise cls.create_payment_intent_side_effect

        intent_id = f"pi_test_{uuid.uuid4().hex[:8]}"
        return PaymentIntentResult(
            id=intent_id,
            status="requires_payment_method",
            amount_cents=params.amount_cents,
            currency=params.currency,
            client_secret=f"{intent_id}_secret_abc123",
            metadata=params.metadata,
        )

    @classmethod
    def retrieve_payment_intent(cls, payment_intent_id, trace_id=None):
        cls._record("retrieve_payment_intent", payment_intent_id=payment_intent_id)
        if cls.retrieve_payment_intent_response:
            return cls.retrieve_payment_intent_response
        return PaymentIntentResult(
            id=payment_intent_id,
            status="succeeded",
            amount_cents=20000,
            currency="usd",
            latest_charge="ch_test_123",
        )

    @classmethod
    def capture_payment_intent(cls, payment_intent_id, idempotency_key, trace_id=None):
        cls._record(
            "capture_payment_intent",
            payment_intent_id=payment_intent_id,
            idempotency_key=idempotency_key,
        )
        if cls.capture_payment_intent_side_effect:
            raise cls.capture_payment_intent_side_effect
        return cls.capture_payment_intent_response or PaymentIntentResult(
            id=payment_intent_id,
            status="succeeded",
            amount_cents=20000,
            currency="usd",
            latest_charge="ch_test_captured",
        )

    @classmethod
    def create_transfer(
        cls,
        amount_cents,
        destination_account,
        idempotency_key,
        currency="usd",
        metadata=None,
        trace_id=None,
    ):
        cls._record(
            "create_transfer",
            amount_cents=amount_cents,
            destination_account=destination_account,
            idempotency_key=idempotency_key,
        )
        if cls.create_transfer_side_effect and len(cls.calls["create_transfer"]) >= cls.create_transfer_fail_on:
            raise cls.create_transfer_side_effect
        return TransferResult(
            id=f"tr_test_{uuid.uuid4().hex[:8]}",
            amount_cents=amount_cents,
            currency=currency,
            destination_account=destination_account,
            metadata=metadata or {},
        )


class MockPayPalAdapter:
    """Mock PayPal adapter for testing."""

    capture_order_response: CaptureResult = None
    capture_order_side_effect: Exception = None
    get_order_response: OrderResult = None

    calls: dict[str, list[Any]] = {}

    @classmethod
    def reset(cls):
        cls.capture_order_response = None
        cls.capture_order_side_effect = None
        cls.get_order_response = None
        cls.calls = {}

    @classmethod
    def _record(cls, name: str, **kwargs) -> None:
        cls.calls.setdefault(name, []).append(kwargs)

    @classmethod
    def create_order(cls, params, trace_id=None):
        cls._record("create_order", params=params, trace_id=trace_id)
        order_id = f"ORDER-{uuid.uuid4().hex[:12].upper()}"
        return OrderResult(
            id=order_id,
            status="CREATED",
            approval_url=f"https://www.sandbox.paypal.com/checkoutnow?token={order_id}",
        )

    @classmethod
    def capture_order(cls, order_id, request_id=None, trace_id=None):
        cls._record("capture_order", order_id=order_id, request_id=request_id)
        if cls.capture_order_side_effect:
            raise cls.capture_order_side_effect
        return cls.capture_order_response or CaptureResult(
            order_id=order_id,
            status="COMPLETED",
            capture_id="CAPTURE-123",
            capture_status="COMPLETED",
        )

    @classmethod
    def get_order(cls, order_id, trace_id=None):
        cls._record("get_order", order_id=order_id)
        return cls.get_order_response or OrderResult(
            id=order_id,
            status="COMPLETED",
            capture_id="CAPTURE-EARLIER",
        )


@pytest.fixture
def mock_stripe_adapter():
    """Provide a clean MockStripeAdapter for each test."""
    MockStripeAdapter.reset()
    return MockStripeAdapter


@pytest.fixture
def mock_paypal_adapter():
    MockPayPalAdapter.reset()
    return MockPayPalAdapter


@pytest.fixture
def builder(mock_stripe_adapter, mock_paypal_adapter):
    return PaymentIntentBuilder(stripe_adapter=mock_stripe_adapter, paypal_adapter=mock_paypal_adapter)


@pytest.fixture
def reconciliation(mock_stripe_adapter, mock_paypal_adapter):
    return ReconciliationService(stripe_adapter=mock_stripe_adapter, paypal_adapter=mock_paypal_adapter)


@pytest.fixture
def escrow(mock_stripe_adapter):
    return EscrowService(stripe_adapter=mock_stripe_adapter)


# =============================================================================
# Participants and Commissions
# =============================================================================


@pytest.fixture
def client_user(db):
    return UserFactory()


@pytest.fixture
def artist(db):
    return ArtistFactory()


@pytest.fixture
def other_user(db):
    return UserFactory()


@pytest.fixture
def priced_commission(client_user, artist):
    """In-progress commission priced at 1000.00 with a 20% deposit."""
    return CommissionFactory(
        client=client_user,
        artist=artist,
        status=CommissionStatus.IN_PROGRESS,
        final_price=Decimal("1000.00"),
        deposit_percentage=Decimal("20.00"),
    )


@pytest.fixture
def milestones(priced_commission):
    """Three milestones of 300/300/400 on priced_commission; only the first is unlocked."""
    amounts = [Decimal("300.00"), Decimal("300.00"), Decimal("400.00")]
    milestones = [
        MilestoneFactory(
            commission=priced_commission,
            milestone_number=number,
            amount=amount,
            percentage=amount / Decimal(10),
            is_locked=number != 1,
        )
        for number, amount in enumerate(amounts, start=1)
    ]
    return milestones


@pytest.fixture
def completed_commission(client_user, artist):
    """Completed commission with funds held in escrow."""
    return CommissionFactory(
        client=client_user,
        artist=artist,
        status=CommissionStatus.COMPLETED,
        final_price=Decimal("1000.00"),
        escrow_status=EscrowStatus.HELD,
    )


@pytest.fixture
def payout_account(artist):
    return PayoutAccountFactory(artist=artist)


@pytest.fixture
def reload():
    """Re-fetch a model instance (FSM-protected status rules out refresh_from_db)."""

    def _reload(instance):
        return type(instance).objects.get(pk=instance.pk)

    return _reload


# =============================================================================
# API Clients
# =============================================================================


def _jwt_client(user) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def client_api(client_user):
    return _jwt_client(client_user)


@pytest.fixture
def artist_api(artist):
    return _jwt_client(artist)


@pytest.fixture
def other_api(other_user):
    return _jwt_client(other_user)


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def use_mock_adapters(monkeypatch, mock_stripe_adapter, mock_paypal_adapter):
    """Route the services built inside views and webhooks to the mock adapters."""
    monkeypatch.setattr("payments.services.intent_builder.StripeAdapter", mock_stripe_adapter)
    monkeypatch.setattr("payments.services.intent_builder.PayPalAdapter", mock_paypal_adapter)
    monkeypatch.setattr("payments.services.reconciliation_service.StripeAdapter", mock_stripe_adapter)
    monkeypatch.setattr("payments.services.reconciliation_service.PayPalAdapter", mock_paypal_adapter)
    monkeypatch.setattr("payments.services.escrow_service.StripeAdapter", mock_stripe_adapter)

