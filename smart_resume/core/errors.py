"""
Service error taxonomy and the handlers that render it as JSON.

Every failure leaving the API is a JSON object with a human-readable
``message`` and an ``error`` type name. Internal detail goes to the log only.
"""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

logger = logging.getLogger("smart_resume.errors")


class ServiceError(RuntimeError):
    """Base class for failures that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.detail = detail


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized. Please login."


class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User exists"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "File not found"


class ExtractionError(ServiceError):
    default_message = "Failed to analyze resume"


class StoreError(ServiceError):
    default_message = "Server error"


class PartialFailure(ServiceError):
    """The stored binary and its record diverged during deletion."""

    default_message = "File deleted but its history record could not be removed"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "service_error path=%s type=%s detail=%s",
            request.url.path,
            exc.__class__.__name__,
            exc.detail or exc.message,
        )
    else:
        logger.info("request_rejected path=%s type=%s", request.url.path, exc.__class__.__name__)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "error": exc.__class__.__name__},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message, "error": "HTTPException"},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(error.get("loc", ["", "?"])[-1]) for error in exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": f"Invalid or missing fields: {', '.join(fields)}", "error": "ValidationError"},
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info("rate_limited path=%s limit=%s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"message": "Too many requests. Please wait a minute and try again.", "error": "RateLimitExceeded"},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error path=%s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": "InternalError"},
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)
