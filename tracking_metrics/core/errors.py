"""
Error family for tracking-metrics.

Rule: every error has a machine-readable `code` string so clients can
branch on it without parsing English messages. The errors themselves know
nothing about HTTP; `HTTP_STATUS_BY_ERROR` below is the only place a
status code is attached, and only the FastAPI handlers read it.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class TrackingMetricsError(Exception):
    """Base class for all application-level errors."""
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidUnitError(TrackingMetricsError):
    code = "INVALID_UNIT"

    def __init__(self, provided_unit: str, metric_type: str, valid_units: Sequence[str]):
        self.provided_unit = provided_unit
        self.metric_type = metric_type
        self.valid_units = list(valid_units)
        super().__init__(
            message=f"Invalid unit '{provided_unit}' for metric type '{metric_type}'",
            details={
                "provided_unit": provided_unit,
                "valid_units": self.valid_units,
                "metric_type": metric_type,
            },
        )


class StoreUnavailableError(TrackingMetricsError):
    """Transient storage failure; safe for the caller to retry."""
    code = "STORE_UNAVAILABLE"

    def __init__(self, message: str = "Metric store is unavailable.", details: dict[str, Any] | None = None):
        super().__init__(message=message, details=details)


class UserNotFoundError(TrackingMetricsError):
    code = "USER_NOT_FOUND"

    def __init__(self, name: str):
        super().__init__(
            message=f"User '{name}' not found.",
            details={"name": name},
        )


class UserAlreadyExistsError(TrackingMetricsError):
    code = "USER_ALREADY_EXISTS"

    def __init__(self, name: str):
        super().__init__(
            message=f"User '{name}' already exists.",
            details={"name": name},
        )


HTTP_STATUS_BY_ERROR: dict[type[TrackingMetricsError], int] = {
    InvalidUnitError: status.HTTP_400_BAD_REQUEST,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    UserAlreadyExistsError: status.HTTP_409_CONFLICT,
}


def http_status_for(exc: TrackingMetricsError) -> int:
    for cls in type(exc).__mro__:
        if cls in HTTP_STATUS_BY_ERROR:
            return HTTP_STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def app_exception_handler(request: Request, exc: TrackingMetricsError) -> JSONResponse:
    return JSONResponse(
        status_code=http_status_for(exc),
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(
                str(loc) for loc in error["loc"] if loc not in ("body", "query", "path")
            ),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=StoreUnavailableError().to_dict(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
