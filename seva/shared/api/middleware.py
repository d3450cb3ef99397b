"""
Shared API Middleware
======================

Common middleware and exception handlers for the FastAPI application.

Application exceptions are mapped onto HTTP responses here so that
controllers can simply let them propagate:

| Exception                                  | Status |
|--------------------------------------------|--------|
| ValidationException                        | 400    |
| AuthenticationException                    | 401    |
| ResourceNotFoundException                  | 404    |
| ConflictException, InvalidTransition...    | 409    |
| ExternalServiceException (storage, relay)  | 502    |
| anything else                              | 500    |
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from seva.core.exceptions import (
    ApplicationException,
    AuthenticationException,
    ConflictException,
    ExternalServiceException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ValidationException,
)
from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    An incoming X-Correlation-ID header is reused; otherwise a new one is
    generated and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records response times and exposes them as headers."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.request_count = 0
        self.total_response_time = 0.0

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        self.request_count += 1

        response = await call_next(request)

        response_time = time.perf_counter() - start_time
        self.total_response_time += response_time

        response.headers["X-Response-Time"] = f"{response_time:.3f}s"
        response.headers["X-Request-Count"] = str(self.request_count)

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs all requests and responses.

    Provides audit trail and debugging information.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


def _status_for(exc: ApplicationException) -> int:
    if isinstance(exc, ValidationException):
        return 400
    if isinstance(exc, AuthenticationException):
        return 401
    if isinstance(exc, ResourceNotFoundException):
        return 404
    if isinstance(exc, (ConflictException, InvalidTransitionException)):
        return 409
    if isinstance(exc, ExternalServiceException):
        return 502
    return 500


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """Map domain and collaborator errors onto HTTP status codes."""
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    status_code = _status_for(exc)
    message = exc.user_message if isinstance(exc, AuthenticationException) else exc.message

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Request rejected",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "status_code": status_code,
            "error_type": type(exc).__name__,
            "error_message": exc.message
        }
    )

    content = {"detail": message, "correlation_id": correlation_id}
    if isinstance(exc, ValidationException) and exc.errors:
        content["errors"] = exc.errors
    elif exc.details and not isinstance(exc, AuthenticationException):
        content["context"] = exc.details
    return JSONResponse(status_code=status_code, content=content)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Returns consistent error responses for all exceptions.
    """
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )

    # Don't expose internal details in production
    is_dev = getattr(getattr(request.app.state, "settings", None), "environment", None) == "development"

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if is_dev else None
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
