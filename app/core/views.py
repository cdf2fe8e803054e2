"""
Core views providing infrastructure endpoints and API error mapping.

Contents:
    health_check: Liveness/readiness endpoint
    application_exception_handler: DRF exception handler that renders
        BaseApplicationError subclasses with their error code and status
"""

import logging

from django.db import connection
from django.http import JsonResponse
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable

    Example Response:
        {"status": "healthy", "database": "connected"}
    """
    health_status = {"status": "healthy", "database": "unknown"}
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    return JsonResponse(health_status, status=200 if is_healthy else 503)


def application_exception_handler(exc, context):
    """
    Render domain errors as ``{"error", "error_code", "details"}``.

    Anything that is not a BaseApplicationError falls through to DRF's
    default handler.
    """
    if isinstance(exc, BaseApplicationError):
        if exc.retryable:
            logger.warning(
                f"Retryable failure in API call: {exc}",
                extra={"error_code": exc.error_code},
            )
        return Response(exc.to_dict(), status=exc.http_status)
    return exception_handler(exc, context)
