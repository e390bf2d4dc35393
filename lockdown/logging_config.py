"""
Central logging configuration for the lockdown service.

Provides:
- Structured logging (JSON in production, human-readable in development)
- Request and principal correlation via contextvars (set by middleware and deps)
- Environment-aware log levels

Usage:
    from lockdown.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Reverted update", extra={"item_id": item.id, "fields": ["status"]})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

# Set by RequestIdMiddleware for the lifetime of a request
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
# Set by the principal dependency once the acting user is resolved
principal_id_var: ContextVar[Optional[str]] = ContextVar("principal_id", default=None)

# LogRecord attributes that are never copied into the JSON body
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "request_id", "principal_id",
})


def get_request_id() -> Optional[str]:
    """Get the current request ID from context, if set."""
    return request_id_var.get()


def get_principal_id() -> Optional[str]:
    """Get the acting principal's ID from context, if set."""
    return principal_id_var.get()


class ContextFilter(logging.Filter):
    """Filter that copies request and principal IDs from context onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        record.principal_id = get_principal_id() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for production log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for ctx_key in ("request_id", "principal_id"):
            value = getattr(record, ctx_key, None)
            if value and value != "-":
                log_obj[ctx_key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Anything passed via extra= in the log call
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or value is None:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj)


def _create_dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s user=%(principal_id)s %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'development' or 'production'
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    # Records created outside a handler (e.g. by caplog) still need both fields
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        for ctx_key in ("request_id", "principal_id"):
            if not hasattr(record, ctx_key):
                setattr(record, ctx_key, "-")
        return record

    logging.setLogRecordFactory(record_factory)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates on reload
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())

    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(_create_dev_formatter())

    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Logs automatically include request_id and principal_id when available.
    Use extra={} for additional structured fields.
    """
    return logging.getLogger(name)
