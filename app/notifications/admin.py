"""Django admin configuration for notifications."""

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "recipient", "event_type", "title", "is_read", "created_at"]
    list_filter = ["event_type", "is_read"]
    raw_id_fields = ["recipient"]
    readonly_fields = ["created_at", "updated_at", "data"]
