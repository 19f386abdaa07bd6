"""
DRF serializers for the payments app.

The payment endpoints speak the client app's camelCase field names; input
serializers map them onto the service arguments with ``source``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from payments.models import PaymentTransaction
from payments.state_machines import PaymentProvider, TransactionType

# =============================================================================
# Input
# =============================================================================


class OpenPaymentSerializer(serializers.Serializer):
    commissionId = serializers.UUIDField(source="commission_id")
    paymentType = serializers.ChoiceField(source="payment_type", choices=TransactionType.choices)
    provider = serializers.ChoiceField(choices=PaymentProvider.choices)
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
        min_value=Decimal("0.01"),
    )
    milestoneId = serializers.UUIDField(source="milestone_id", required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["payment_type"] == TransactionType.MILESTONE and not attrs.get("milestone_id"):
            raise serializers.ValidationError({"milestoneId": "Required for milestone payments"})
        if attrs["payment_type"] == TransactionType.TIP and attrs.get("amount") is None:
            raise serializers.ValidationError({"amount": "Required for tips"})
        return attrs


class CapturePaymentSerializer(serializers.Serializer):
    providerOrderId = serializers.CharField(source="provider_order_id", max_length=255)
    provider = serializers.ChoiceField(choices=PaymentProvider.choices)


class ReleaseEscrowSerializer(serializers.Serializer):
    commissionId = serializers.UUIDField(source="commission_id")


# =============================================================================
# Output
# =============================================================================


class OpenPaymentResponseSerializer(serializers.Serializer):
    provider = serializers.CharField()
    providerOrderId = serializers.CharField(source="provider_order_id")
    clientSecretOrApprovalUrl = serializers.CharField(source="client_secret_or_approval_url", allow_null=True)
    amountDue = serializers.DecimalField(source="amount_due", max_digits=10, decimal_places=2)
    transactionId = serializers.UUIDField(source="transaction_id")
    platformFee = serializers.DecimalField(source="platform_fee", max_digits=10, decimal_places=2)
    artistPayout = serializers.DecimalField(source="artist_payout", max_digits=10, decimal_places=2)


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = [
            "id",
            "commission",
            "milestone",
            "payer",
            "recipient",
            "provider",
            "provider_order_id",
            "transaction_type",
            "amount",
            "currency",
            "platform_fee",
            "artist_payout",
            "status",
            "processed_at",
            "failed_at",
            "refunded_at",
            "failure_reason",
            "transferred_at",
            "created_at",
        ]
        read_only_fields = fields


class CapturePaymentResponseSerializer(serializers.Serializer):
    transaction = PaymentTransactionSerializer()
    alreadyProcessed = serializers.BooleanField(source="already_processed")
    milestoneId = serializers.UUIDField(source="milestone.id", allow_null=True, default=None)


class EscrowReleaseResponseSerializer(serializers.Serializer):
    commissionId = serializers.UUIDField(source="commission.id")
    escrowStatus = serializers.CharField(source="commission.escrow_status")
    transferred = PaymentTransactionSerializer(many=True)
    totalTransferred = serializers.DecimalField(source="total_transferred", max_digits=10, decimal_places=2)


class EscrowSummarySerializer(serializers.Serializer):
    commissionId = serializers.UUIDField(source="commission_id")
    escrowStatus = serializers.CharField(source="escrow_status")
    heldAmount = serializers.DecimalField(source="held_amount", max_digits=10, decimal_places=2)
    transferredAmount = serializers.DecimalField(source="transferred_amount", max_digits=10, decimal_places=2)
    pendingTransfers = serializers.IntegerField(source="pending_transfers")
