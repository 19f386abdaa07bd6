"""
Webhook event handlers for Stripe and PayPal events.

This module provides a handler registry keyed by (provider, event type)
and the handlers that turn provider events into reconciliation calls.

Handlers never touch PaymentTransaction rows directly. They extract the
provider references from the event and hand them to ReconciliationService,
which owns the idempotent state changes shared with the capture endpoint.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    # Register a custom handler
    @register_handler("stripe", "custom.event")
    def handle_custom_event(webhook_event, service) -> ServiceResult:
        ...

    # Dispatch an event to its handler
    result = dispatch_webhook(webhook_event, ReconciliationService())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from core.services import ServiceResult

from payments.models import WebhookEvent
from payments.state_machines import PaymentProvider

if TYPE_CHECKING:
    from payments.services import ReconciliationService


logger = logging.getLogger(__name__)

Handler = Callable[[WebhookEvent, "ReconciliationService"], ServiceResult]


# =============================================================================
# Handler Registry
# =============================================================================


# Maps (provider, event type) to handler functions
WEBHOOK_HANDLERS: dict[tuple[str, str], Handler] = {}


def register_handler(provider: str, event_type: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Usage:
        @register_handler("stripe", "payment_intent.succeeded")
        def handle_payment_succeeded(webhook_event, service) -> ServiceResult:
            ...
    """

    def decorator(func: Handler) -> Handler:
        WEBHOOK_HANDLERS[(provider, event_type)] = func
        logger.debug(f"Registered webhook handler for {provider} {event_type}")
        return func

    return decorator


def dispatch_webhook(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    """
    Dispatch a webhook event to the appropriate handler.

    Unknown event types are acknowledged with a success result so that
    providers stop redelivering events we do not subscribe to on purpose.
    """
    handler = WEBHOOK_HANDLERS.get((webhook_event.provider, webhook_event.event_type))

    if not handler:
        logger.info(
            f"No handler registered for event type: {webhook_event.event_type}",
            extra={
                "provider": webhook_event.provider,
                "provider_event_id": webhook_event.provider_event_id,
            },
        )
        return ServiceResult.success(None)

    logger.info(
        f"Dispatching {webhook_event.event_type} to handler",
        extra={
            "provider": webhook_event.provider,
            "provider_event_id": webhook_event.provider_event_id,
        },
    )

    return handler(webhook_event, service)


# =============================================================================
# Stripe Handlers
# =============================================================================


@register_handler(PaymentProvider.STRIPE, "payment_intent.succeeded")
def handle_stripe_payment_succeeded(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    intent = webhook_event.get_object()
    intent_id = intent.get("id")
    if not intent_id:
        return _invalid_payload(webhook_event, "data.object.id")

    return service.confirm_success(
        PaymentProvider.STRIPE,
        intent_id,
        capture_id=intent.get("latest_charge") or intent_id,
    )


@register_handler(PaymentProvider.STRIPE, "payment_intent.payment_failed")
def handle_stripe_payment_failed(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    intent = webhook_event.get_object()
    intent_id = intent.get("id")
    if not intent_id:
        return _invalid_payload(webhook_event, "data.object.id")

    error = intent.get("last_payment_error") or {}
    reason = error.get("message") or "Payment failed"
    return service.mark_failed(PaymentProvider.STRIPE, intent_id, reason)


@register_handler(PaymentProvider.STRIPE, "charge.refunded")
def handle_stripe_charge_refunded(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    """Only full refunds move the transaction; partial ones are acknowledged."""
    charge = webhook_event.get_object()
    if not charge.get("refunded"):
        logger.info(
            "Partial refund ignored",
            extra={"provider_event_id": webhook_event.provider_event_id, "charge_id": charge.get("id")},
        )
        return ServiceResult.success(None)

    reference = charge.get("payment_intent") or charge.get("id")
    if not reference:
        return _invalid_payload(webhook_event, "data.object.payment_intent")
    return service.mark_refunded(PaymentProvider.STRIPE, reference)


# =============================================================================
# PayPal Handlers
# =============================================================================


@register_handler(PaymentProvider.PAYPAL, "PAYMENT.CAPTURE.COMPLETED")
def handle_paypal_capture_completed(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    capture = webhook_event.get_object()
    order_id = _related_ids(capture).get("order_id")
    if not order_id:
        return _invalid_payload(webhook_event, "resource.supplementary_data.related_ids.order_id")

    return service.confirm_success(
        PaymentProvider.PAYPAL,
        order_id,
        capture_id=capture.get("id"),
    )


@register_handler(PaymentProvider.PAYPAL, "PAYMENT.CAPTURE.DENIED")
def handle_paypal_capture_denied(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    capture = webhook_event.get_object()
    reference = _related_ids(capture).get("order_id") or capture.get("id")
    if not reference:
        return _invalid_payload(webhook_event, "resource.id")

    reason = (capture.get("status_details") or {}).get("reason") or "Capture denied"
    return service.mark_failed(PaymentProvider.PAYPAL, reference, reason)


@register_handler(PaymentProvider.PAYPAL, "PAYMENT.CAPTURE.REFUNDED")
def handle_paypal_capture_refunded(webhook_event: WebhookEvent, service: ReconciliationService) -> ServiceResult:
    # The resource is the refund; the capture it refunds is in related_ids or the "up" link
    refund = webhook_event.get_object()
    capture_id = _related_ids(refund).get("capture_id")
    if not capture_id:
        for link in refund.get("links") or []:
            if link.get("rel") == "up" and link.get("href"):
                capture_id = link["href"].rstrip("/").rsplit("/", 1)[-1]
                break
    capture_id = capture_id or refund.get("id")
    if not capture_id:
        return _invalid_payload(webhook_event, "resource.id")

    return service.mark_refunded(PaymentProvider.PAYPAL, capture_id)


# =============================================================================
# Helpers
# =============================================================================


def _related_ids(resource: dict) -> dict:
    return (resource.get("supplementary_data") or {}).get("related_ids") or {}


def _invalid_payload(webhook_event: WebhookEvent, missing: str) -> ServiceResult:
    logger.warning(
        "Webhook payload missing required field",
        extra={
            "provider": webhook_event.provider,
            "provider_event_id": webhook_event.provider_event_id,
            "missing": missing,
        },
    )
    return ServiceResult.failure(
        f"Webhook payload is missing {missing}",
        error_code="INVALID_WEBHOOK_PAYLOAD",
    )
