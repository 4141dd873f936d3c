"""Structured logging configuration for the pg-crud admin service.

Logs go to stdout either as JSON objects or as readable text lines. A filter
redacts credentials that may end up in log arguments or ``extra`` fields.
"""

import json
import logging
import sys
from typing import Any, ClassVar

REDACTED = "***REDACTED***"

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "request_id"}


class SensitiveDataFilter(logging.Filter):
    """Redact credentials from log record arguments and extra fields.

    Example:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(SensitiveDataFilter())
    """

    SENSITIVE_KEYS: ClassVar[set[str]] = {
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "api_key",
        "authorization",
        "dsn",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place; never drops it."""
        if record.args:
            if isinstance(record.args, dict):
                record.args = self._sanitize_dict(record.args)
            else:
                record.args = tuple(self._sanitize_data(arg) for arg in record.args)

        for key in list(record.__dict__):
            if key in _RESERVED_ATTRS:
                continue
            value = record.__dict__[key]
            if key.lower() in self.SENSITIVE_KEYS:
                record.__dict__[key] = REDACTED
            elif isinstance(value, dict):
                record.__dict__[key] = self._sanitize_dict(value)

        return True

    def _sanitize_data(self, data: Any) -> Any:
        if isinstance(data, dict):
            return self._sanitize_dict(data)
        if isinstance(data, (list, tuple)):
            return type(data)(self._sanitize_data(item) for item in data)
        return data

    def _sanitize_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            key: REDACTED if str(key).lower() in self.SENSITIVE_KEYS else self._sanitize_data(value)
            for key, value in data.items()
        }


class JSONFormatter(logging.Formatter):
    """JSON log formatter for log aggregation systems."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        # Base format: timestamp [level] logger - message
        formatted = (
            f"{self.formatTime(record, self.datefmt)} "
            f"[{record.levelname}] "
            f"{record.name} - "
            f"{record.getMessage()}"
        )

        request_id = getattr(record, "request_id", None)
        if request_id:
            formatted += f" [request_id={request_id}]"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
    enable_sensitive_filter: bool = True,
) -> None:
    """Configure application logging with structured output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format type ("json" or "text").
        enable_sensitive_filter: Whether to enable sensitive data filtering.

    Example:
        >>> configure_logging(level="DEBUG", log_format="text")
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = TextFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    handler.setFormatter(formatter)

    if enable_sensitive_filter:
        handler.addFilter(SensitiveDataFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # Reduce noise from third-party libraries
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
