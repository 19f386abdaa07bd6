"""
Payment admin configuration.

Transactions and webhook events are read-only here: their state only
changes through the reconciliation and escrow services.
"""

from django.contrib import admin

from payments.models import PaymentTransaction, PayoutAccount, WebhookEvent


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "provider",
        "provider_order_id",
        "transaction_type",
        "amount",
        "currency",
        "status",
        "transferred_at",
        "created_at",
    ]
    list_filter = ["provider", "transaction_type", "status"]
    search_fields = ["id", "provider_order_id", "provider_capture_id", "payer__email", "recipient__email"]
    raw_id_fields = ["commission", "milestone", "payer", "recipient"]
    readonly_fields = [
        "id",
        "status",
        "provider_order_id",
        "provider_capture_id",
        "amount",
        "platform_fee",
        "artist_payout",
        "correlation_metadata",
        "processed_at",
        "failed_at",
        "refunded_at",
        "payout_id",
        "transferred_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    fieldsets = (
        (None, {"fields": ("id", "commission", "milestone", "payer", "recipient")}),
        (
            "Provider",
            {"fields": ("provider", "provider_order_id", "provider_capture_id", "correlation_metadata")},
        ),
        (
            "Amounts",
            {"fields": ("transaction_type", "amount", "currency", "platform_fee", "artist_payout")},
        ),
        (
            "Status",
            {"fields": ("status", "failure_reason", "processed_at", "failed_at", "refunded_at")},
        ),
        ("Escrow", {"fields": ("payout_id", "transferred_at")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )


@admin.register(PayoutAccount)
class PayoutAccountAdmin(admin.ModelAdmin):
    """Provides visibility into the artists' Stripe Connect account status."""

    list_display = ["id", "artist", "stripe_account_id", "onboarding_status", "payouts_enabled", "created_at"]
    list_filter = ["onboarding_status", "payouts_enabled"]
    search_fields = ["id", "stripe_account_id", "artist__email"]
    raw_id_fields = ["artist"]
    readonly_fields = ["id", "created_at", "updated_at", "version"]
    ordering = ["-created_at"]


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """Webhook events are immutable once received."""

    list_display = [
        "id",
        "provider",
        "provider_event_id",
        "event_type",
        "status",
        "retry_count",
        "processed_at",
        "created_at",
    ]
    list_filter = ["provider", "status", "event_type", "created_at"]
    search_fields = ["id", "provider_event_id", "event_type"]
    readonly_fields = [
        "id",
        "provider",
        "provider_event_id",
        "event_type",
        "payload",
        "status",
        "processed_at",
        "error_message",
        "retry_count",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False
