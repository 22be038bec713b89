"""DRF exception handling for booking engine errors."""

from __future__ import annotations

import structlog
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain import errors

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR = (
    (errors.NotFound, status.HTTP_404_NOT_FOUND),
    (errors.ValidationError, status.HTTP_400_BAD_REQUEST),
    (errors.RuleViolation, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (errors.PricingRejected, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (errors.InventoryHorizonExceeded, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (errors.InsufficientInventory, status.HTTP_409_CONFLICT),
    (errors.InvalidTransition, status.HTTP_409_CONFLICT),
    (errors.ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: errors.BookingEngineError) -> int:
    for error_type, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def engine_exception_handler(exc, context):  # type: ignore
    """Render engine errors as ``{"error": code, "detail": message}``."""

    if isinstance(exc, errors.BookingEngineError):
        http_status = status_for(exc)
        body = {"error": exc.code, "detail": exc.message}
        failing_date = getattr(exc, "date", None)
        if failing_date is not None:
            body["date"] = failing_date.isoformat()
        if http_status >= 500:
            logger.error("api.engine_error", code=exc.code, detail=exc.message)
        return Response(body, status=http_status)
    return exception_handler(exc, context)
