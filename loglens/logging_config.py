"""Logging configuration for LogLens.

Structured logs go through structlog on top of the stdlib logging tree, so
records from the core modules (stdlib loggers with ``extra=``) and from the
CLI/API layers (structlog loggers) end up on the same stderr handler.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from loglens.config import get_settings

# Query text can be arbitrarily long; keep log lines readable.
MAX_QUERY_LOG_LENGTH = 500

_QUERY_KEYS = ("sql", "query", "pipeline")

_SENSITIVE_MARKERS = (
    "access_key",
    "secret",
    "session_token",
    "password",
    "authorization",
)

# Chatty third-party loggers that only matter when debugging.
_NOISY_LOGGERS = ("botocore", "aiobotocore", "aioboto3", "urllib3", "httpx")


def add_timestamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def censor_sensitive_keys(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact AWS credentials and auth headers."""
    for key in list(event_dict.keys()):
        if any(marker in key.lower() for marker in _SENSITIVE_MARKERS):
            event_dict[key] = "***REDACTED***"

    return event_dict


def truncate_query_text(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Shorten SQL and pipeline text attached to a log entry."""
    for key in _QUERY_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_QUERY_LOG_LENGTH:
            event_dict[key] = value[:MAX_QUERY_LOG_LENGTH] + "..."

    return event_dict


def setup_logging() -> None:
    """Configure structlog and the root logger from settings."""
    settings = get_settings()
    level = getattr(logging, settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        censor_sensitive_keys,
        truncate_query_text,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    noisy_level = logging.DEBUG if level == logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_operation(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    source: str | None = None,
    **kwargs: Any,
) -> None:
    """Log a translate/query/stream operation against an optional log group."""
    context: dict[str, Any] = {"operation": operation}
    if source:
        context["source"] = source
    context.update(kwargs)

    logger.info("operation", **context)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    operation: str,
    source: str | None = None,
    **kwargs: Any,
) -> None:
    """Log a failed operation, including LogLensError context when present."""
    context: dict[str, Any] = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if source:
        context["source"] = source
    error_context = getattr(error, "context", None)
    if isinstance(error_context, dict):
        context.update({f"error_{key}": value for key, value in error_context.items()})
    context.update(kwargs)

    logger.error("operation_failed", **context, exc_info=True)
