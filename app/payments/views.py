"""
API views for commission payments.

Endpoints (prefixed with /api/v1/payments/):
    POST /open/                                   Open a Stripe intent or PayPal order (client)
    POST /capture/                                Confirm a finished payment (payer)
    POST /release-escrow/                         Transfer held payouts to the artist (client)
    GET  /transactions/                           My payments, made or received
    GET  /commissions/{id}/transactions/          A commission's payments (participants)
    GET  /commissions/{id}/escrow/                Held and transferred totals (participants)
    POST /webhooks/stripe/ | webhooks/paypal/     Provider webhooks (see payments.webhooks)

Security:
    - All endpoints require authentication except the webhooks
    - Webhooks verify the provider signature instead
"""

from __future__ import annotations

from django.db.models import Q
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.views import ServiceAPIView

from commissions.services.access import get_commission, require_participant

from payments.models import PaymentTransaction
from payments.serializers import (
    CapturePaymentResponseSerializer,
    CapturePaymentSerializer,
    EscrowReleaseResponseSerializer,
    EscrowSummarySerializer,
    OpenPaymentResponseSerializer,
    OpenPaymentSerializer,
    PaymentTransactionSerializer,
    ReleaseEscrowSerializer,
)
from payments.services import EscrowService, PaymentIntentBuilder, ReconciliationService


class OpenPaymentView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=OpenPaymentSerializer,
        responses={
            201: OpenPaymentResponseSerializer,
            409: OpenApiResponse(description="Milestone paid or locked, or commission not completed (tips)"),
            502: OpenApiResponse(description="Payment provider error"),
        },
    )
    def post(self, request):
        serializer = OpenPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = PaymentIntentBuilder().open_payment(
            commission_id=data["commission_id"],
            user=request.user,
            payment_type=data["payment_type"],
            provider=data["provider"],
            amount=data["amount"],
            milestone_id=data["milestone_id"],
        )
        return Response(OpenPaymentResponseSerializer(result).data, status=status.HTTP_201_CREATED)


class CapturePaymentView(ServiceAPIView):
    """
    Capture channel for clients returning from the provider checkout.

    Safe to call after the webhook already landed: the response then has
    alreadyProcessed=true and nothing is applied twice.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=CapturePaymentSerializer,
        responses={
            200: CapturePaymentResponseSerializer,
            400: OpenApiResponse(description="Provider reports the payment is not completed"),
            403: OpenApiResponse(description="Caller is not the payer"),
        },
    )
    def post(self, request):
        serializer = CapturePaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ReconciliationService().capture(
            provider_order_id=serializer.validated_data["provider_order_id"],
            user=request.user,
            provider=serializer.validated_data["provider"],
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_404_NOT_FOUND)
        return Response(CapturePaymentResponseSerializer(result.data).data)


class ReleaseEscrowView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=ReleaseEscrowSerializer,
        responses={
            200: EscrowReleaseResponseSerializer,
            400: OpenApiResponse(description="Artist has no payout account"),
            409: OpenApiResponse(description="Commission not completed or nothing held"),
            502: OpenApiResponse(description="A transfer failed; retry releases the remainder"),
        },
    )
    def post(self, request):
        serializer = ReleaseEscrowSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = EscrowService().release_escrow(serializer.validated_data["commission_id"], request.user)
        return Response(EscrowReleaseResponseSerializer(result).data)


class TransactionListView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentTransactionSerializer(many=True)})
    def get(self, request):
        transactions = PaymentTransaction.objects.filter(
            Q(payer=request.user) | Q(recipient=request.user)
        ).order_by("-created_at")
        return Response(PaymentTransactionSerializer(transactions, many=True).data)


class CommissionTransactionListView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: PaymentTransactionSerializer(many=True)})
    def get(self, request, commission_id):
        commission = get_commission(commission_id)
        require_participant(commission, request.user)
        transactions = PaymentTransaction.objects.filter(commission=commission).order_by("created_at")
        return Response(PaymentTransactionSerializer(transactions, many=True).data)


class EscrowSummaryView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: EscrowSummarySerializer})
    def get(self, request, commission_id):
        summary = EscrowService.escrow_summary(commission_id, request.user)
        return Response(EscrowSummarySerializer(summary).data)
