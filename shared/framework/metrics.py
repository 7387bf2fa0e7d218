"""Prometheus metrics collection for the schedule services."""

from typing import Dict, Any, Optional

from prometheus_client import (
    Counter, Histogram, Gauge, Info,
    CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
)


DEFAULT_BUCKETS = [0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]


class MetricsCollector:
    """Centralized metrics collection for a service."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        # Prometheus metric names cannot contain dashes
        self.service_name = service_name.replace("-", "_")
        self.registry = registry or CollectorRegistry()
        self.metrics: Dict[str, Any] = {}

        self._init_common_metrics()

    def _init_common_metrics(self):
        """Initialize common metrics for all services."""
        self.info = Info(
            f"{self.service_name}_info",
            f"Information about {self.service_name}",
            registry=self.registry
        )

        # Request metrics
        self.request_count = Counter(
            f"{self.service_name}_requests_total",
            f"Total number of requests processed by {self.service_name}",
            ["method", "endpoint", "status"],
            registry=self.registry
        )

        self.request_duration = Histogram(
            f"{self.service_name}_request_duration_seconds",
            f"Request duration in seconds for {self.service_name}",
            ["method", "endpoint"],
            buckets=DEFAULT_BUCKETS,
            registry=self.registry
        )

        # Store query metrics
        self.query_count = Counter(
            f"{self.service_name}_queries_total",
            "Total number of store queries by operation and outcome",
            ["operation", "outcome"],
            registry=self.registry
        )

        self.query_duration = Histogram(
            f"{self.service_name}_query_duration_seconds",
            "Store query duration in seconds",
            ["operation"],
            buckets=DEFAULT_BUCKETS,
            registry=self.registry
        )

        # Error metrics
        self.errors_total = Counter(
            f"{self.service_name}_errors_total",
            f"Total number of errors in {self.service_name}",
            ["error_type", "component"],
            registry=self.registry
        )

        # Health metrics
        self.health_status = Gauge(
            f"{self.service_name}_health_status",
            f"Health status of {self.service_name} (1=healthy, 0=unhealthy)",
            registry=self.registry
        )

        self.memory_usage = Gauge(
            f"{self.service_name}_memory_usage_bytes",
            f"Memory usage in bytes for {self.service_name}",
            registry=self.registry
        )

    def record_request(self, method: str, endpoint: str, status: str, duration: float):
        """Record a request metric."""
        self.request_count.labels(method=method, endpoint=endpoint, status=status).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_query(self, operation: str, outcome: str, duration: float):
        """Record a store query metric."""
        self.query_count.labels(operation=operation, outcome=outcome).inc()
        self.query_duration.labels(operation=operation).observe(duration)

    def record_error(self, error_type: str, component: str):
        """Record an error metric."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def set_health_status(self, healthy: bool):
        """Set the health status metric."""
        self.health_status.set(1 if healthy else 0)

    def set_memory_usage(self, bytes_used: int):
        """Set the memory usage metric."""
        self.memory_usage.set(bytes_used)

    def update_service_info(self, version: str, environment: str, **kwargs):
        """Update service information."""
        info_dict = {
            "version": version,
            "environment": environment,
            **kwargs
        }
        self.info.info(info_dict)

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self.registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics."""
        return CONTENT_TYPE_LATEST
