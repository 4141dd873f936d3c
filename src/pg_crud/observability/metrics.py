"""Prometheus metrics collector for the pg-crud admin service.

This module implements metrics collection using prometheus_client, tracking
row operations, catalog loads, translated errors and pool capacity.
"""

from prometheus_client import Counter, Gauge, Histogram, start_http_server


class MetricsCollector:
    """Centralized metrics collector using Prometheus client.

    Metrics Categories:
    - Operation metrics: counts and durations per engine operation
    - Catalog metrics: introspection latency
    - Error metrics: failures by error category
    - Pool metrics: configured pool capacity

    Example:
        >>> metrics = MetricsCollector()
        >>> metrics.increment_operation("create", "visitors", "success")
    """

    _instance: "MetricsCollector | None" = None

    def __new__(cls) -> "MetricsCollector":
        """Ensure singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize_metrics()
        return cls._instance

    def _initialize_metrics(self) -> None:
        # Operation Metrics
        self.operations: Counter = Counter(
            "pg_crud_operations_total",
            "Total number of engine operations processed",
            labelnames=["operation", "table", "status"],
        )

        self.operation_duration: Histogram = Histogram(
            "pg_crud_operation_duration_seconds",
            "Engine operation duration in seconds",
            labelnames=["operation"],
            buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0),
        )

        # Catalog Metrics
        self.catalog_load_duration: Histogram = Histogram(
            "pg_crud_catalog_load_duration_seconds",
            "Catalog introspection duration in seconds",
            buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0),
        )

        # Error Metrics
        self.errors: Counter = Counter(
            "pg_crud_errors_total",
            "Total number of failed operations by error category",
            labelnames=["category"],
        )

        # Pool Metrics
        self.db_pool_size: Gauge = Gauge(
            "pg_crud_db_pool_size",
            "Configured maximum size of the database connection pool",
        )

    def start_metrics_server(self, port: int) -> None:
        """Start the Prometheus metrics HTTP server.

        Args:
            port: Port number to listen on for metrics scraping.
        """
        start_http_server(port)

    def increment_operation(self, operation: str, table: str, status: str) -> None:
        """Increment the operation counter.

        Args:
            operation: Engine operation (list, create, update, delete, meta).
            table: Target table name, or ``*`` for catalog-wide operations.
            status: ``success`` or an error category.
        """
        self.operations.labels(operation=operation, table=table, status=status).inc()

    def observe_operation_duration(self, operation: str, duration: float) -> None:
        self.operation_duration.labels(operation=operation).observe(duration)

    def observe_catalog_load_duration(self, duration: float) -> None:
        self.catalog_load_duration.observe(duration)

    def increment_error(self, category: str) -> None:
        self.errors.labels(category=category).inc()

    def set_db_pool_size(self, size: int) -> None:
        self.db_pool_size.set(size)


# Singleton instance
metrics = MetricsCollector()
