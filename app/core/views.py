"""
Core views providing infrastructure endpoints and API error translation.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, and the
helper that renders application errors for the DRF views of every app.
"""

from __future__ import annotations

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def error_response(exc: BaseApplicationError) -> Response:
    """
    Render an application error as a DRF response.

    The status code comes from the exception class (400, 403, 404, 409, 502).
    """
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        "Request rejected",
        extra={"error_code": exc.error_code, "status": exc.http_status},
    )
    return Response(exc.to_dict(), status=exc.http_status)


class ServiceAPIView(APIView):
    """
    APIView that renders application errors raised by the service layer.

    Services raise BaseApplicationError subclasses; anything else goes
    through DRF's normal exception handling.
    """

    def handle_exception(self, exc):
        if isinstance(exc, BaseApplicationError):
            return error_response(exc)
        return super().handle_exception(exc)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected"

    HTTP Status Codes:
        200: All systems operational
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.error("Health check: database unreachable", exc_info=True)
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # Cache failures degrade but do not fail the check (IGNORE_EXCEPTIONS is on)
    cache.set("health_check", "ok", timeout=1)
    if cache.get("health_check") == "ok":
        health_status["cache"] = "connected"
    else:
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)
