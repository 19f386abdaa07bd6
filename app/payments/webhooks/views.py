"""
Webhook endpoint views for Stripe and PayPal.

Both views:
1. Verify the delivery (Stripe signature header, PayPal verify API)
2. Create/retrieve the WebhookEvent record (idempotent per provider event id)
3. Dispatch the event synchronously to its handler
4. Return 200 once the local write succeeded, 400 for a malformed event,
   500 if the local write failed

A 500 makes the provider redeliver, and redelivery is safe because every
reconciliation write is conditional.

Usage:
    # In urls.py
    from payments.webhooks.views import paypal_webhook, stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
        path("webhooks/paypal/", paypal_webhook, name="paypal_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import PayPalAdapter, StripeAdapter
from payments.exceptions import (
    PayPalAPIUnavailableError,
    PayPalTimeoutError,
    PayPalWebhookVerificationError,
    StripeInvalidRequestError,
)
from payments.models import WebhookEvent
from payments.services import ReconciliationService
from payments.state_machines import PaymentProvider, WebhookEventStatus
from payments.webhooks.handlers import dispatch_webhook


logger = logging.getLogger(__name__)

# Failures that mean "we have no such payment"; retrying will not help
ACKNOWLEDGED_ERROR_CODES = frozenset({"TRANSACTION_NOT_FOUND"})

# The event itself is malformed; redelivering the same body cannot succeed
REJECTED_ERROR_CODES = frozenset({"INVALID_WEBHOOK_PAYLOAD"})


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive and process Stripe webhook events.

    Returns:
        HttpResponse with status:
        - 200: Event applied, duplicate, or not relevant
        - 400: Missing or invalid signature, or malformed event
        - 500: Local write failed; Stripe will retry

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    signature = request.headers.get("Stripe-Signature", "")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return HttpResponse("Missing signature", status=400)

    try:
        event_data = StripeAdapter.verify_webhook_signature(request.body, signature)
    except StripeInvalidRequestError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"provider": PaymentProvider.STRIPE, "error": str(e)},
        )
        return HttpResponse("Invalid signature", status=400)

    return _process_event(PaymentProvider.STRIPE, event_data)


@csrf_exempt
@require_POST
def paypal_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive and process PayPal webhook events.

    Returns:
        HttpResponse with status:
        - 200: Event applied, duplicate, or not relevant
        - 400: Invalid JSON, signature rejected, or malformed event
        - 503: PayPal verification API unavailable; PayPal will retry
        - 500: Local write failed; PayPal will retry
    """
    try:
        event_data = json.loads(request.body)
    except ValueError:
        logger.warning("PayPal webhook body is not valid JSON")
        return HttpResponse("Invalid payload", status=400)

    if not isinstance(event_data, dict):
        return HttpResponse("Invalid payload", status=400)

    try:
        PayPalAdapter.verify_webhook_signature(request.headers, event_data)
    except PayPalWebhookVerificationError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"provider": PaymentProvider.PAYPAL, "error": str(e)},
        )
        return HttpResponse("Invalid signature", status=400)
    except (PayPalAPIUnavailableError, PayPalTimeoutError) as e:
        logger.error(
            "PayPal webhook verification unavailable",
            extra={"error": str(e), "event_id": event_data.get("id")},
        )
        return HttpResponse("Verification unavailable", status=503)

    return _process_event(PaymentProvider.PAYPAL, event_data)


def _process_event(provider: str, event_data: dict[str, Any]) -> HttpResponse:
    provider_event_id = event_data.get("id")
    event_type = event_data.get("type") if provider == PaymentProvider.STRIPE else event_data.get("event_type")

    if not provider_event_id or not event_type:
        logger.warning("Webhook missing required fields", extra={"provider": provider})
        return HttpResponse("Invalid event", status=400)

    log_context = {
        "provider": provider,
        "provider_event_id": provider_event_id,
        "event_type": event_type,
    }
    logger.info(f"Received {provider} webhook: {event_type}", extra=log_context)

    webhook_event, created = WebhookEvent.objects.get_or_create(
        provider=provider,
        provider_event_id=provider_event_id,
        defaults={
            "event_type": event_type,
            "payload": event_data,
            "status": WebhookEventStatus.PENDING,
        },
    )

    if not created and webhook_event.is_processed:
        logger.info("Webhook already processed, returning success", extra=log_context)
        return HttpResponse("Already processed", status=200)

    webhook_event.mark_processing()
    webhook_event.save(update_fields=["status", "retry_count", "updated_at"])

    try:
        result = dispatch_webhook(webhook_event, ReconciliationService())
    except Exception as e:
        logger.error(
            f"Webhook handler raised {type(e).__name__}",
            extra=log_context,
            exc_info=True,
        )
        webhook_event.mark_failed(f"{type(e).__name__}: {e}")
        webhook_event.save(update_fields=["status", "error_message", "updated_at"])
        return HttpResponse("Processing failed", status=500)

    if result.success or result.error_code in ACKNOWLEDGED_ERROR_CODES:
        if not result.success:
            logger.warning(
                "Webhook acknowledged without a matching payment",
                extra={**log_context, "error_code": result.error_code},
            )
        webhook_event.mark_processed()
        webhook_event.save(update_fields=["status", "processed_at", "error_message", "updated_at"])
        return HttpResponse("Processed", status=200)

    if result.error_code in REJECTED_ERROR_CODES:
        logger.warning(
            "Webhook payload rejected",
            extra={**log_context, "error_code": result.error_code, "error": result.error},
        )
        webhook_event.mark_failed(result.error or "")
        webhook_event.save(update_fields=["status", "error_message", "updated_at"])
        return HttpResponse("Invalid event", status=400)

    logger.error(
        "Webhook processing failed",
        extra={**log_context, "error_code": result.error_code, "error": result.error},
    )
    webhook_event.mark_failed(result.error or "")
    webhook_event.save(update_fields=["status", "error_message", "updated_at"])
    return HttpResponse("Processing failed", status=500)
