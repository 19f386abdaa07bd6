"""
URL configuration for the commission payments backend.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/commissions/           - Commission lifecycle and milestone plans
        <id>/accept|decline|complete|cancel/  - Status transitions
        <id>/milestones/generate|custom|confirm/ - Milestone plan
        milestones/<id>/start|complete/        - Milestone work
        artists/<artist_id>/queue-status/      - Admission queue status
    /api/v1/payments/              - Payment endpoints
        open/                      - Open a provider payment order/intent
        capture/                   - Client-confirmed capture
        release-escrow/            - Release held funds to the artist
        transactions/              - Transaction history
        webhooks/stripe/           - Stripe webhook endpoint (POST)
        webhooks/paypal/           - PayPal webhook endpoint (POST)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("commissions/", include("commissions.urls")),
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Commission Payments Admin"
admin.site.site_title = "Admin Portal"
admin.site.index_title = "Commissions, milestones and payments"
