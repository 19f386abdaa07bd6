"""
Tests for the health check and ServiceAPIView error rendering.
"""

import pytest
from rest_framework.permissions import AllowAny
from rest_framework.test import APIRequestFactory

from core.exceptions import PermissionDeniedError
from core.views import ServiceAPIView


class RejectingView(ServiceAPIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        raise PermissionDeniedError("Only the client can pay", error_code="NOT_COMMISSION_CLIENT")


class TestServiceAPIView:
    def test_application_error_is_rendered(self):
        request = APIRequestFactory().get("/rejecting/")

        response = RejectingView.as_view()(request)

        assert response.status_code == 403
        assert response.data == {"error": "Only the client can pay", "error_code": "NOT_COMMISSION_CLIENT"}


@pytest.mark.django_db
class TestHealthCheck:
    def test_healthy(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected", "cache": "connected"}
