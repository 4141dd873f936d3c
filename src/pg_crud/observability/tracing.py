"""Request tracing and context propagation for the pg-crud admin service.

Each HTTP request gets a request ID that is propagated through the engine
and attached to log records emitted through ``TracingLogger``.
"""

import contextvars
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

REQUEST_ID_HEADER = "X-Request-ID"

# Context variable for current request ID
_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def generate_request_id() -> str:
    """Generate a unique UUID4-based request ID."""
    return str(uuid.uuid4())


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return _request_id_var.get()


@asynccontextmanager
async def request_context(request_id: str | None = None) -> AsyncIterator[str]:
    """Context manager for request tracing.

    Args:
        request_id: Optional request ID. If not provided, a new one is generated.

    Yields:
        The request ID for this context.

    Example:
        >>> async with request_context() as req_id:
        ...     await engine.list_rows("visitors")
    """
    if request_id is None:
        request_id = generate_request_id()

    token = _request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        _request_id_var.reset(token)


class TracingLogger:
    """Logger wrapper that automatically includes the request ID.

    Example:
        >>> logger = TracingLogger(__name__)
        >>> async with request_context():
        ...     logger.info("Row created", extra={"table": "visitors"})
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        extra = kwargs.pop("extra", None) or {}
        request_id = get_request_id()

        # Only add request_id if not already present
        if request_id and "request_id" not in extra:
            extra["request_id"] = request_id

        kwargs["extra"] = extra
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an error message with traceback."""
        kwargs["exc_info"] = True
        self._log(logging.ERROR, msg, *args, **kwargs)


def get_tracing_logger(name: str) -> TracingLogger:
    """Get a tracing logger instance (typically for ``__name__``)."""
    return TracingLogger(name)
