"""
DRF serializers for the commissions app.

Input serializers validate request bodies before they reach the services;
output serializers render models and service results.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from commissions.models import Commission, Milestone, MilestoneStageTemplate, ProgressUpdate
from commissions.state_machines import MilestoneStage

# =============================================================================
# Output
# =============================================================================


class CommissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Commission
        fields = [
            "id",
            "client",
            "artist",
            "artwork_reference",
            "details",
            "client_note",
            "deadline_text",
            "budget",
            "final_price",
            "status",
            "artist_response",
            "responded_at",
            "completed_at",
            "cancelled_at",
            "payment_type",
            "payment_status",
            "escrow_status",
            "deposit_percentage",
            "total_paid",
            "current_milestone",
            "milestone_plan_confirmed",
            "current_revision_count",
            "max_revision_count",
            "revision_fee_per_request",
            "total_revision_fees",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MilestoneStageTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = MilestoneStageTemplate
        fields = ["id", "stage", "title", "description", "default_percentage", "typical_order"]
        read_only_fields = fields


class MilestoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = Milestone
        fields = [
            "id",
            "commission",
            "milestone_number",
            "title",
            "description",
            "stage",
            "amount",
            "percentage",
            "payment_status",
            "paid_at",
            "is_locked",
            "payment_required_before_work",
            "progress_update",
            "due_date",
            "revision_fee_added",
            "started_at",
            "completed_at",
        ]
        read_only_fields = fields


class ProgressUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProgressUpdate
        fields = [
            "id",
            "commission",
            "milestone",
            "update_type",
            "image_url",
            "notes",
            "requires_approval",
            "approval_status",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class QueueStatusSerializer(serializers.Serializer):
    slots_total = serializers.IntegerField()
    slots_used = serializers.IntegerField()
    slots_available = serializers.IntegerField()
    is_full = serializers.BooleanField()
    commissions_paused = serializers.BooleanField()
    waitlist_enabled = serializers.BooleanField()
    accepting_commissions = serializers.BooleanField()


class MilestonePaymentStatusSerializer(serializers.Serializer):
    milestone_id = serializers.UUIDField(source="milestone.id")
    title = serializers.CharField(source="milestone.title")
    amount = serializers.DecimalField(source="milestone.amount", max_digits=10, decimal_places=2)
    payment_status = serializers.CharField(source="milestone.payment_status")
    is_locked = serializers.BooleanField(source="milestone.is_locked")
    can_pay = serializers.BooleanField()


# =============================================================================
# Input
# =============================================================================


class CommissionRequestSerializer(serializers.Serializer):
    artist_id = serializers.UUIDField()
    details = serializers.CharField()
    artwork_reference = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    client_note = serializers.CharField(required=False, allow_blank=True, default="")
    budget = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        required=False,
        allow_null=True,
        default=None,
        min_value=Decimal("0.01"),
    )
    deadline_text = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class ArtistResponseSerializer(serializers.Serializer):
    artist_response = serializers.CharField(required=False, allow_blank=True, default="")


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class SetPriceSerializer(serializers.Serializer):
    final_price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        required=False,
        min_value=Decimal("0.01"),
    )
    deadline_text = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide final_price or deadline_text")
        return attrs


class GeneratePlanSerializer(serializers.Serializer):
    template_ids = serializers.ListField(
        child=serializers.IntegerField(),
        required=False,
        allow_empty=True,
    )


class CustomMilestoneSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    percentage = serializers.DecimalField(max_digits=7, decimal_places=3, min_value=Decimal("0.001"))
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        required=False,
        min_value=Decimal("0.01"),
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    stage = serializers.ChoiceField(choices=MilestoneStage.choices, required=False)
    payment_required_before_work = serializers.BooleanField(required=False, default=True)


class CustomPlanSerializer(serializers.Serializer):
    milestones = CustomMilestoneSerializer(many=True, allow_empty=False)


class MilestoneUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    stage = serializers.ChoiceField(choices=MilestoneStage.choices, required=False)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal("0.01"))
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, min_value=Decimal("0.01"))
    due_date = serializers.DateField(required=False, allow_null=True)
    payment_required_before_work = serializers.BooleanField(required=False)


class CompleteMilestoneSerializer(serializers.Serializer):
    image_url = serializers.URLField(max_length=500)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RevisionRequestSerializer(serializers.Serializer):
    notes = serializers.CharField()
