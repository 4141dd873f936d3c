"""Observability module for the pg-crud admin service.

This module provides:
- Prometheus metrics collection
- Structured JSON or text logging
- Request ID propagation

Example:
    >>> from pg_crud.observability import configure_logging, metrics, request_context
    >>> configure_logging(level="INFO", log_format="json")
    >>> async with request_context() as request_id:
    ...     metrics.increment_operation("list", "visitors", "success")
"""

from pg_crud.observability.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    TextFormatter,
    configure_logging,
)
from pg_crud.observability.metrics import MetricsCollector, metrics
from pg_crud.observability.tracing import (
    REQUEST_ID_HEADER,
    TracingLogger,
    generate_request_id,
    get_request_id,
    get_tracing_logger,
    request_context,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "metrics",
    # Logging
    "configure_logging",
    "JSONFormatter",
    "TextFormatter",
    "SensitiveDataFilter",
    # Tracing
    "REQUEST_ID_HEADER",
    "request_context",
    "generate_request_id",
    "get_request_id",
    "TracingLogger",
    "get_tracing_logger",
]
