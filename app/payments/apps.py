"""
Payments app configuration.

This app provides commission payment processing:
- Stripe PaymentIntents and PayPal orders
- Webhook and capture reconciliation
- Escrow release through Stripe Connect
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
