"""
Tests for payments app.

This package contains test modules for:
- test_models.py: PaymentTransaction, PayoutAccount, WebhookEvent model tests
- test_intent_builder.py: Opening Stripe intents and PayPal orders
- test_reconciliation_service.py: Webhook and capture reconciliation
- test_escrow_service.py: Escrow release and transfers
- test_webhook_handlers.py / test_webhook_views.py: Webhook routing and endpoints
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_reconciliation_service.py
"""
