"""
Structured Logging
==================

JSON-structured logging with correlation ID tracking.

Provides:
- Structured JSON logs (parseable by log aggregators)
- Correlation ID for request tracing
- Redaction of credentials and masking of staff phone numbers
- Performance timing utilities

Usage:
    from seva.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Facility status updated", extra={"facility_code": "T-101"})
"""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import jsonlogger

REDACTED = "***REDACTED***"
_SECRET_KEYS = ("password", "token", "api_key", "public_key")
_PHONE_KEYS = ("phone", "mobile")


def mask_phone(value: str) -> str:
    """Keep the country code and the last four digits of a phone number."""
    if len(value) <= 4:
        return "*" * len(value)
    prefix = value[:3] if value.startswith("+") else ""
    return prefix + "*" * (len(value) - len(prefix) - 4) + value[-4:]


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    Custom JSON formatter with additional fields.

    Adds:
    - timestamp in ISO format
    - correlation_id when available
    - Environment info
    """

    def __init__(self, *args: Any, environment: str = "unknown", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._environment = environment

    def add_fields(
        self,
        log_record: logging.LogRecord,
        record_dict: dict[str, Any],
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record_dict, message_dict)

        if not isinstance(record_dict, dict):
            return

        if not record_dict.get("timestamp"):
            record_dict["timestamp"] = datetime.now(timezone.utc).isoformat()

        if hasattr(log_record, "correlation_id"):
            record_dict["correlation_id"] = log_record.correlation_id
        elif "correlation_id" in message_dict:
            record_dict["correlation_id"] = message_dict["correlation_id"]

        record_dict["environment"] = getattr(log_record, "environment", self._environment)

        for key, value in list(record_dict.items()):
            if not isinstance(value, str):
                continue
            lowered = key.lower()
            if any(secret in lowered for secret in _SECRET_KEYS):
                record_dict[key] = REDACTED
            elif any(phone in lowered for phone in _PHONE_KEYS):
                record_dict[key] = mask_phone(value)


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
) -> None:
    """
    Configure structured JSON logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: Environment name for log context
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(
        CustomJsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            environment=environment,
        )
    )
    root_logger.addHandler(handler)

    # Silence noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def get_context_logger(name: str, correlation_id: str | None = None) -> logging.Logger:
    """
    Get a logger with correlation ID for request tracing.

    Args:
        name: Logger name
        correlation_id: Request correlation ID

    Returns:
        logging.Logger: Logger with correlation_id in extra
    """
    logger = get_logger(name)
    if correlation_id:
        logger = _ContextAdapter(logger, {"correlation_id": correlation_id})
    return logger


class _ContextAdapter(logging.LoggerAdapter):
    """Adds the bound context to each record without dropping per-call extras."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


@contextmanager
def log_latency(logger: logging.Logger, operation: str, **extra_context: Any):
    """
    Context manager for measuring and logging operation latency.

    Usage:
        with log_latency(logger, "bulk_import", file_name="roster.xlsx"):
            await service.import_rows(rows)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{operation} completed",
            extra={
                "operation": operation,
                "latency_ms": round(latency_ms, 2),
                **extra_context,
            },
        )
