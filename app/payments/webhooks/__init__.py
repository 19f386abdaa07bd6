"""
Webhook handling for payment events from Stripe and PayPal.

Deliveries are verified, stored idempotently as WebhookEvent rows and
applied synchronously through ReconciliationService.
"""

from payments.webhooks.handlers import dispatch_webhook, register_handler
from payments.webhooks.views import paypal_webhook, stripe_webhook

__all__ = [
    "dispatch_webhook",
    "paypal_webhook",
    "register_handler",
    "stripe_webhook",
]
