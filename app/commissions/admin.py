"""
Django admin configuration for commission models.
"""

from django.contrib import admin

from commissions.models import (
    ArtistSettings,
    Commission,
    Milestone,
    MilestoneStageTemplate,
    PendingReview,
    ProgressUpdate,
)


class MilestoneInline(admin.TabularInline):
    model = Milestone
    extra = 0
    fields = ["milestone_number", "title", "amount", "percentage", "payment_status", "is_locked"]
    readonly_fields = fields
    can_delete = False


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    """Commissions are read-only here; state changes go through the services."""

    list_display = [
        "id",
        "client",
        "artist",
        "status",
        "payment_type",
        "payment_status",
        "escrow_status",
        "created_at",
    ]
    list_filter = ["status", "payment_type", "payment_status", "escrow_status"]
    search_fields = ["id", "client__email", "artist__email"]
    raw_id_fields = ["client", "artist", "current_milestone"]
    readonly_fields = ["status", "version", "created_at", "updated_at"]
    inlines = [MilestoneInline]


@admin.register(ArtistSettings)
class ArtistSettingsAdmin(admin.ModelAdmin):
    list_display = ["artist", "max_queue_slots", "is_open", "commissions_paused", "allow_waitlist"]
    raw_id_fields = ["artist"]


@admin.register(MilestoneStageTemplate)
class MilestoneStageTemplateAdmin(admin.ModelAdmin):
    list_display = ["stage", "title", "default_percentage", "typical_order", "is_active"]
    list_editable = ["default_percentage", "typical_order", "is_active"]


@admin.register(ProgressUpdate)
class ProgressUpdateAdmin(admin.ModelAdmin):
    list_display = ["id", "commission", "update_type", "approval_status", "created_at"]
    list_filter = ["update_type", "approval_status"]
    raw_id_fields = ["commission", "milestone", "created_by"]


@admin.register(PendingReview)
class PendingReviewAdmin(admin.ModelAdmin):
    list_display = ["commission", "user", "review_type", "created_at"]
    raw_id_fields = ["commission", "user"]
