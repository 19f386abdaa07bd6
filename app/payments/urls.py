"""
URL configuration for the payments app.

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.
"""

from django.urls import path

from payments import views
from payments.webhooks.views import paypal_webhook, stripe_webhook

app_name = "payments"

urlpatterns = [
    path("open/", views.OpenPaymentView.as_view(), name="payment-open"),
    path("capture/", views.CapturePaymentView.as_view(), name="payment-capture"),
    path("release-escrow/", views.ReleaseEscrowView.as_view(), name="release-escrow"),
    path("transactions/", views.TransactionListView.as_view(), name="transaction-list"),
    path(
        "commissions/<uuid:commission_id>/transactions/",
        views.CommissionTransactionListView.as_view(),
        name="commission-transactions",
    ),
    path(
        "commissions/<uuid:commission_id>/escrow/",
        views.EscrowSummaryView.as_view(),
        name="commission-escrow",
    ),
    # Webhook endpoints
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    path("webhooks/paypal/", paypal_webhook, name="paypal_webhook"),
]
