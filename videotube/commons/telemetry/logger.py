"""Structured logging with JSON output, correlation IDs and scoped context."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, ClassVar

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# ContextVar has no default_factory; readers treat LookupError as empty.
log_context_var: ContextVar[dict[str, Any]] = ContextVar("log_context")

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation ID to the current context, generating one if needed."""
    cid = correlation_id or uuid.uuid4().hex
    correlation_id_var.set(cid)
    return cid


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    try:
        return log_context_var.get().copy()
    except LookupError:
        return {}


def set_log_context(**kwargs: Any) -> None:
    """Add key/value pairs to the logging context."""
    ctx = get_log_context()
    ctx.update(kwargs)
    log_context_var.set(ctx)


def clear_log_context() -> None:
    """Clear the logging context."""
    log_context_var.set({})


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line, suitable for log shippers."""

    def __init__(self, *, include_path: bool = True) -> None:
        """Initialize the formatter.

        Args:
            include_path: Include ``file:line`` of the call site.
        """
        super().__init__()
        self.include_path = include_path

    def format(self, record: logging.LogRecord) -> str:
        """Render the record as a JSON document."""
        payload: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if self.include_path:
            payload["path"] = f"{record.pathname}:{record.lineno}"

        cid = get_correlation_id()
        if cid:
            payload["correlation_id"] = cid

        payload["message"] = record.getMessage()

        context = get_log_context()
        if context:
            payload["context"] = context

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(_extra_fields(record))
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Colored single-line output for local development."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Render the record as colored text with extras appended."""
        color = self.COLORS.get(record.levelname, "")
        parts = [
            datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S"),
            f"{color}{record.levelname:8}{self.RESET}",
            f"[{record.name}]",
        ]

        cid = get_correlation_id()
        if cid:
            parts.append(f"[{cid[:8]}]")

        parts.append(record.getMessage())

        fields = {**get_log_context(), **_extra_fields(record)}
        if fields:
            parts.append(" ".join(f"{k}={v}" for k, v in fields.items()))

        message = " ".join(parts)
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def build_formatter(format_type: str) -> logging.Formatter:
    """Return the formatter for ``json`` or ``text`` output."""
    if format_type == "json":
        return JsonFormatter()
    return TextFormatter()


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    logger_name: str | None = None,
) -> logging.Logger:
    """Attach a single stdout handler to ``logger_name`` (root by default).

    Args:
        level: Log level name.
        format_type: ``json`` or ``text``.
        logger_name: Logger to configure.

    Returns:
        The configured logger.
    """
    numeric_level = getattr(logging, level.upper())
    logger = logging.getLogger(logger_name)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(build_formatter(format_type))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name (usually ``__name__``)."""
    return logging.getLogger(name)
