"""
Tests for payment API endpoints.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from commissions.state_machines import EscrowStatus
from payments.models import PaymentTransaction
from payments.state_machines import TransactionStatus
from payments.tests.factories import PaymentTransactionFactory

BASE = "/api/v1/payments"


@pytest.mark.django_db
@pytest.mark.usefixtures("use_mock_adapters")
class TestOpenPaymentEndpoint:
    def test_open_deposit(self, client_api, priced_commission):
        response = client_api.post(
            f"{BASE}/open/",
            {"commissionId": str(priced_commission.id), "paymentType": "deposit", "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["amountDue"] == "200.00"
        assert response.data["platformFee"] == "20.00"
        assert response.data["artistPayout"] == "180.00"
        assert response.data["providerOrderId"].startswith("pi_test_")
        assert response.data["clientSecretOrApprovalUrl"]
        assert PaymentTransaction.objects.filter(pk=response.data["transactionId"]).exists()

    def test_open_paypal_order(self, client_api, priced_commission):
        response = client_api.post(
            f"{BASE}/open/",
            {"commissionId": str(priced_commission.id), "paymentType": "full", "provider": "paypal"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["providerOrderId"].startswith("ORDER-")
        assert "paypal.com" in response.data["clientSecretOrApprovalUrl"]

    def test_milestone_payment_needs_milestone_id(self, client_api, priced_commission):
        response = client_api.post(
            f"{BASE}/open/",
            {"commissionId": str(priced_commission.id), "paymentType": "milestone", "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 400
        assert "milestoneId" in response.data

    def test_locked_milestone_returns_409(self, client_api, priced_commission, milestones):
        response = client_api.post(
            f"{BASE}/open/",
            {
                "commissionId": str(priced_commission.id),
                "paymentType": "milestone",
                "provider": "stripe",
                "milestoneId": str(milestones[2].id),
            },
            format="json",
        )

        assert response.status_code == 409
        assert response.data["error_code"] == "MILESTONE_LOCKED"

    def test_artist_cannot_pay(self, artist_api, priced_commission):
        response = artist_api.post(
            f"{BASE}/open/",
            {"commissionId": str(priced_commission.id), "paymentType": "deposit", "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 403

    def test_unknown_commission(self, client_api):
        response = client_api.post(
            f"{BASE}/open/",
            {"commissionId": str(uuid4()), "paymentType": "deposit", "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 404

    def test_requires_authentication(self, api_client, priced_commission):
        response = api_client.post(
            f"{BASE}/open/",
            {"commissionId": str(priced_commission.id), "paymentType": "deposit", "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 401


@pytest.mark.django_db
@pytest.mark.usefixtures("use_mock_adapters")
class TestCaptureEndpoint:
    def test_capture_twice(self, client_api, priced_commission):
        txn = PaymentTransactionFactory(commission=priced_commission)
        body = {"providerOrderId": txn.provider_order_id, "provider": "stripe"}

        first = client_api.post(f"{BASE}/capture/", body, format="json")
        second = client_api.post(f"{BASE}/capture/", body, format="json")

        assert first.status_code == 200
        assert first.data["alreadyProcessed"] is False
        assert first.data["transaction"]["status"] == TransactionStatus.SUCCEEDED
        assert second.status_code == 200
        assert second.data["alreadyProcessed"] is True

    def test_other_user_cannot_capture(self, other_api, priced_commission):
        txn = PaymentTransactionFactory(commission=priced_commission)

        response = other_api.post(
            f"{BASE}/capture/",
            {"providerOrderId": txn.provider_order_id, "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 403

    def test_unknown_order(self, client_api):
        response = client_api.post(
            f"{BASE}/capture/",
            {"providerOrderId": "pi_missing", "provider": "stripe"},
            format="json",
        )

        assert response.status_code == 404
        assert response.data["error_code"] == "TRANSACTION_NOT_FOUND"


@pytest.mark.django_db
@pytest.mark.usefixtures("use_mock_adapters")
class TestEscrowEndpoints:
    def test_release_escrow(self, client_api, completed_commission, payout_account):
        PaymentTransactionFactory(commission=completed_commission, status=TransactionStatus.SUCCEEDED)

        response = client_api.post(
            f"{BASE}/release-escrow/",
            {"commissionId": str(completed_commission.id)},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["escrowStatus"] == EscrowStatus.RELEASED
        assert response.data["totalTransferred"] == "180.00"
        assert len(response.data["transferred"]) == 1

    def test_release_before_completion_returns_409(self, client_api, priced_commission, payout_account):
        response = client_api.post(
            f"{BASE}/release-escrow/",
            {"commissionId": str(priced_commission.id)},
            format="json",
        )

        assert response.status_code == 409

    def test_escrow_summary(self, artist_api, completed_commission):
        PaymentTransactionFactory(commission=completed_commission, status=TransactionStatus.SUCCEEDED)

        response = artist_api.get(f"{BASE}/commissions/{completed_commission.id}/escrow/")

        assert response.status_code == 200
        assert response.data["heldAmount"] == "180.00"
        assert response.data["pendingTransfers"] == 1


@pytest.mark.django_db
class TestTransactionListEndpoints:
    def test_my_transactions(self, client_api, artist_api, priced_commission):
        PaymentTransactionFactory(commission=priced_commission)
        PaymentTransactionFactory()

        mine = client_api.get(f"{BASE}/transactions/")
        received = artist_api.get(f"{BASE}/transactions/")

        assert mine.status_code == 200
        assert len(mine.data) == 1
        assert len(received.data) == 1
        assert mine.data[0]["amount"] == "200.00"

    def test_commission_transactions_for_participants_only(self, client_api, other_api, priced_commission):
        PaymentTransactionFactory(commission=priced_commission, amount=Decimal("200.00"))
        PaymentTransactionFactory(commission=priced_commission, status=TransactionStatus.FAILED)

        response = client_api.get(f"{BASE}/commissions/{priced_commission.id}/transactions/")
        forbidden = other_api.get(f"{BASE}/commissions/{priced_commission.id}/transactions/")

        assert response.status_code == 200
        assert len(response.data) == 2
        assert forbidden.status_code == 403
