"""
WebhookEvent model for provider webhook event tracking.

Stores every webhook event received from Stripe or PayPal for idempotent
processing and audit trails. The unique (provider, provider_event_id)
constraint ensures redelivered webhooks are detected.

Usage:
    from payments.models import WebhookEvent

    event, created = WebhookEvent.objects.get_or_create(
        provider=PaymentProvider.STRIPE,
        provider_event_id="evt_1234567890",
        defaults={
            "event_type": "payment_intent.succeeded",
            "payload": webhook_payload,
        },
    )

    if not created and event.is_processed:
        # Duplicate webhook - already processed
        return HttpResponse(status=200)
"""

from __future__ import annotations

from typing import Any

from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import PaymentProvider, WebhookEventStatus


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Tracks provider webhook events for idempotent processing.

    Processing Flow:
        1. Webhook arrives, verify provider signature
        2. Insert/get WebhookEvent with (provider, provider_event_id)
        3. If exists and PROCESSED -> return 200 (duplicate)
        4. Set status to PROCESSING
        5. Route to the handler registered for (provider, event_type)
        6. Set status to PROCESSED or FAILED
        7. If FAILED, respond 500 so the provider redelivers

    Fields:
        provider: stripe or paypal
        provider_event_id: Stripe evt_xxx or PayPal WH-xxx id
        event_type: e.g. payment_intent.succeeded, PAYMENT.CAPTURE.COMPLETED
        payload: Full JSON payload
        status: Processing status
        processed_at: When event was successfully processed
        error_message: Error details if processing failed
        retry_count: Number of processing attempts
    """

    provider = models.CharField(max_length=20, choices=PaymentProvider.choices)

    provider_event_id = models.CharField(max_length=255)

    event_type = models.CharField(max_length=100, db_index=True)

    payload = models.JSONField()

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
    )

    processed_at = models.DateTimeField(null=True, blank=True)

    error_message = models.TextField(null=True, blank=True)

    retry_count = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of processing attempts",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "provider_event_id"],
                name="unique_provider_event",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="webhook_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"WebhookEvent({self.provider}, {self.provider_event_id}, {self.event_type})"

    @property
    def is_processed(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSED

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def mark_processing(self) -> None:
        """
        Mark event as being processed.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSING
        self.retry_count += 1

    def mark_processed(self) -> None:
        """Note: Does not save - caller must save after calling."""
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        """Note: Does not save - caller must save after calling."""
        self.status = WebhookEventStatus.FAILED
        self.error_message = error_message

    def get_object(self) -> dict[str, Any]:
        """
        The resource the event is about.

        Stripe nests it under data.object, PayPal under resource.
        """
        if not isinstance(self.payload, dict):
            return {}
        if self.provider == PaymentProvider.PAYPAL:
            resource = self.payload.get("resource")
        else:
            resource = (self.payload.get("data") or {}).get("object")
        return resource if isinstance(resource, dict) else {}

    def get_object_id(self) -> str | None:
        return self.get_object().get("id")
