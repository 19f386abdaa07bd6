"""
API views for commissions and milestone plans.

Endpoints (prefixed with /api/v1/commissions/):
    GET  /                                    My commissions (as client or artist)
    POST /                                    Request a commission
    GET  /{id}/                               Commission detail
    POST /{id}/accept/ | decline/ | complete/ | cancel/
    PATCH /{id}/price/                        Set price and deadline (artist)
    GET  /artists/{artist_id}/queue-status/   Artist's queue summary
    GET  /milestones/templates/               Stage templates
    GET  /{id}/milestones/                    Milestone plan
    POST /{id}/milestones/generate/ | custom/ | confirm/
    PATCH /milestones/{id}/                   Edit an unconfirmed milestone (artist)
    POST /milestones/{id}/start/ | complete/
    GET  /milestones/{id}/payment-status/     Whether the client can pay now
    POST /{id}/revisions/                     Request a revision (client)

Views validate input with serializers and delegate to the service layer;
service errors are rendered by ServiceAPIView.
"""

from __future__ import annotations

from django.db.models import Q
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.views import ServiceAPIView

from commissions.models import Commission, Milestone
from commissions.serializers import (
    ArtistResponseSerializer,
    CommissionRequestSerializer,
    CommissionSerializer,
    CompleteMilestoneSerializer,
    CustomPlanSerializer,
    GeneratePlanSerializer,
    MilestonePaymentStatusSerializer,
    MilestoneSerializer,
    MilestoneStageTemplateSerializer,
    MilestoneUpdateSerializer,
    ProgressUpdateSerializer,
    QueueStatusSerializer,
    ReasonSerializer,
    RevisionRequestSerializer,
    SetPriceSerializer,
)
from commissions.services import (
    AdmissionService,
    CommissionLifecycleService,
    MilestonePlanService,
)

# =============================================================================
# Commission lifecycle
# =============================================================================


class CommissionListCreateView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: CommissionSerializer(many=True)})
    def get(self, request):
        commissions = Commission.objects.filter(
            Q(client=request.user) | Q(artist=request.user)
        ).order_by("-created_at")
        return Response(CommissionSerializer(commissions, many=True).data)

    @extend_schema(
        request=CommissionRequestSerializer,
        responses={
            201: CommissionSerializer,
            409: OpenApiResponse(description="Artist is closed or the queue is full"),
        },
    )
    def post(self, request):
        serializer = CommissionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        commission = CommissionLifecycleService.request_commission(
            client=request.user,
            artist_id=data["artist_id"],
            details=data["details"],
            artwork_reference=data["artwork_reference"],
            client_note=data["client_note"],
            budget=data["budget"],
            deadline_text=data["deadline_text"],
        )
        return Response(CommissionSerializer(commission).data, status=status.HTTP_201_CREATED)


class CommissionDetailView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: CommissionSerializer})
    def get(self, request, commission_id):
        commission = CommissionLifecycleService.get_for_participant(commission_id, request.user)
        return Response(CommissionSerializer(commission).data)


class AcceptCommissionView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ArtistResponseSerializer, responses={200: CommissionSerializer})
    def post(self, request, commission_id):
        serializer = ArtistResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        commission = CommissionLifecycleService.accept(
            commission_id,
            request.user,
            artist_response=serializer.validated_data["artist_response"],
        )
        return Response(CommissionSerializer(commission).data)


class DeclineCommissionView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ReasonSerializer, responses={204: None})
    def post(self, request, commission_id):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CommissionLifecycleService.decline(
            commission_id,
            request.user,
            reason=serializer.validated_data["reason"],
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class CompleteCommissionView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: CommissionSerializer})
    def post(self, request, commission_id):
        commission = CommissionLifecycleService.complete(commission_id, request.user)
        return Response(CommissionSerializer(commission).data)


class CancelCommissionView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=ReasonSerializer, responses={200: CommissionSerializer})
    def post(self, request, commission_id):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        commission = CommissionLifecycleService.cancel(
            commission_id,
            request.user,
            reason=serializer.validated_data["reason"],
        )
        return Response(CommissionSerializer(commission).data)


class SetPriceView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=SetPriceSerializer, responses={200: CommissionSerializer})
    def patch(self, request, commission_id):
        serializer = SetPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        commission = CommissionLifecycleService.set_price(
            commission_id,
            request.user,
            final_price=serializer.validated_data.get("final_price"),
            deadline_text=serializer.validated_data.get("deadline_text"),
        )
        return Response(CommissionSerializer(commission).data)


class QueueStatusView(ServiceAPIView):
    """Public: clients check availability before requesting."""

    permission_classes = [AllowAny]

    @extend_schema(responses={200: QueueStatusSerializer})
    def get(self, request, artist_id):
        queue_status = AdmissionService.queue_status(artist_id)
        return Response(QueueStatusSerializer(queue_status).data)


# =============================================================================
# Milestone plans
# =============================================================================


class MilestoneTemplateListView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MilestoneStageTemplateSerializer(many=True)})
    def get(self, request):
        templates = MilestonePlanService.list_templates()
        return Response(MilestoneStageTemplateSerializer(templates, many=True).data)


class MilestonePlanView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MilestoneSerializer(many=True)})
    def get(self, request, commission_id):
        commission = CommissionLifecycleService.get_for_participant(commission_id, request.user)
        milestones = Milestone.objects.filter(commission=commission).order_by("milestone_number")
        return Response(MilestoneSerializer(milestones, many=True).data)


class GeneratePlanView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=GeneratePlanSerializer, responses={201: MilestoneSerializer(many=True)})
    def post(self, request, commission_id):
        serializer = GeneratePlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        milestones = MilestonePlanService.generate_plan(
            commission_id,
            request.user,
            template_ids=serializer.validated_data.get("template_ids") or None,
        )
        return Response(MilestoneSerializer(milestones, many=True).data, status=status.HTTP_201_CREATED)


class CustomPlanView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=CustomPlanSerializer, responses={201: MilestoneSerializer(many=True)})
    def post(self, request, commission_id):
        serializer = CustomPlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        milestones = MilestonePlanService.create_custom_plan(
            commission_id,
            request.user,
            serializer.validated_data["milestones"],
        )
        return Response(MilestoneSerializer(milestones, many=True).data, status=status.HTTP_201_CREATED)


class ConfirmPlanView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        responses={
            200: CommissionSerializer,
            409: OpenApiResponse(description="Plan already confirmed"),
        },
    )
    def post(self, request, commission_id):
        commission = MilestonePlanService.confirm_plan(commission_id, request.user)
        return Response(CommissionSerializer(commission).data)


class MilestoneDetailView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=MilestoneUpdateSerializer, responses={200: MilestoneSerializer})
    def patch(self, request, milestone_id):
        serializer = MilestoneUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        milestone = MilestonePlanService.update_milestone(
            milestone_id,
            request.user,
            **serializer.validated_data,
        )
        return Response(MilestoneSerializer(milestone).data)


class StartMilestoneView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        responses={
            200: MilestoneSerializer,
            402: OpenApiResponse(description="Payment required before work starts"),
        },
    )
    def post(self, request, milestone_id):
        result = MilestonePlanService.start_milestone(milestone_id, request.user)
        if result.requires_payment:
            return Response(
                {
                    "error": "Payment must be received before starting work on this milestone",
                    "error_code": "PAYMENT_REQUIRED",
                    "requires_payment": True,
                    "milestone_id": str(result.milestone.pk),
                },
                status=status.HTTP_402_PAYMENT_REQUIRED,
            )
        return Response(MilestoneSerializer(result.milestone).data)


class CompleteMilestoneView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=CompleteMilestoneSerializer, responses={201: ProgressUpdateSerializer})
    def post(self, request, milestone_id):
        serializer = CompleteMilestoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        progress_update = MilestonePlanService.complete_milestone(
            milestone_id,
            request.user,
            image_url=serializer.validated_data["image_url"],
            notes=serializer.validated_data["notes"],
        )
        return Response(ProgressUpdateSerializer(progress_update).data, status=status.HTTP_201_CREATED)


class MilestonePaymentStatusView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MilestonePaymentStatusSerializer})
    def get(self, request, milestone_id):
        info = MilestonePlanService.payment_status_for(milestone_id, request.user)
        return Response(MilestonePaymentStatusSerializer(info).data)


class RevisionRequestView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=RevisionRequestSerializer, responses={201: ProgressUpdateSerializer})
    def post(self, request, commission_id):
        serializer = RevisionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        progress_update = MilestonePlanService.request_revision(
            commission_id,
            request.user,
            serializer.validated_data["notes"],
        )
        return Response(ProgressUpdateSerializer(progress_update).data, status=status.HTTP_201_CREATED)
