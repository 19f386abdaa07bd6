"""
Factory Boy factories for payment test data.

Usage:
    from payments.tests.factories import PaymentTransactionFactory, PayoutAccountFactory

    # Pending Stripe deposit for a commission
    txn = PaymentTransactionFactory(commission=commission)

    # A payment that already went through
    txn = PaymentTransactionFactory(commission=commission, status=TransactionStatus.SUCCEEDED)

``status`` is an FSM-protected field; pass it at creation time only.
"""

import uuid
from decimal import Decimal

import factory

from authentication.tests.factories import ArtistFactory
from commissions.state_machines import CommissionStatus
from commissions.tests.factories import CommissionFactory
from payments.models import PaymentTransaction, PayoutAccount, WebhookEvent
from payments.state_machines import (
    OnboardingStatus,
    PaymentProvider,
    TransactionStatus,
    TransactionType,
    WebhookEventStatus,
)


class PaymentTransactionFactory(factory.django.DjangoModelFactory):
    """
    Factory for PaymentTransaction.

    Payer and recipient default to the commission's client and artist.
    """

    class Meta:
        model = PaymentTransaction

    commission = factory.SubFactory(CommissionFactory, status=CommissionStatus.IN_PROGRESS)
    payer = factory.LazyAttribute(lambda o: o.commission.client)
    recipient = factory.LazyAttribute(lambda o: o.commission.artist)
    provider = PaymentProvider.STRIPE
    provider_order_id = factory.LazyFunction(lambda: f"pi_test_{uuid.uuid4().hex[:16]}")
    transaction_type = TransactionType.DEPOSIT
    amount = Decimal("200.00")
    currency = "usd"
    platform_fee = Decimal("20.00")
    artist_payout = Decimal("180.00")
    status = TransactionStatus.PENDING
    correlation_metadata = factory.LazyAttribute(
        lambda o: {"commissionId": str(o.commission.pk), "paymentType": o.transaction_type}
    )


class PayoutAccountFactory(factory.django.DjangoModelFactory):
    """Stripe Connect account that has finished onboarding."""

    class Meta:
        model = PayoutAccount

    artist = factory.SubFactory(ArtistFactory)
    stripe_account_id = factory.Sequence(lambda n: f"acct_test_{n:08d}")
    onboarding_status = OnboardingStatus.COMPLETE
    payouts_enabled = True


class WebhookEventFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = WebhookEvent

    provider = PaymentProvider.STRIPE
    provider_event_id = factory.Sequence(lambda n: f"evt_test_{n:08d}")
    event_type = "payment_intent.succeeded"
    payload = factory.LazyAttribute(
        lambda o: {
            "id": o.provider_event_id,
            "type": o.event_type,
            "data": {"object": {"id": "pi_test_123"}},
        }
    )
    status = WebhookEventStatus.PENDING
