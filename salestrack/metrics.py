"""
Prometheus metrics for the salestrack service.
"""
from decimal import Decimal
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry

from . import SERVICE_NAME, __version__


class Metrics:
    """
    Centralized metrics for the salestrack service.

    Each instance owns its registry so several apps can coexist in one process.
    """

    def __init__(self, service_name: str = SERVICE_NAME, version: str = __version__, registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Business Metrics
        self.events_created_total = Counter(
            "salestrack_events_created_total",
            "Total events created",
            ["event_type"],
            registry=self.registry,
        )

        self.event_value_total = Counter(
            "salestrack_event_value_total",
            "Sum of created event values",
            ["event_type"],
            registry=self.registry,
        )

        self.events_deleted_total = Counter(
            "salestrack_events_deleted_total",
            "Total events deleted",
            registry=self.registry,
        )

        self.validation_failures_total = Counter(
            "salestrack_validation_failures_total",
            "Rejected event inputs, by offending field",
            ["field"],
            registry=self.registry,
        )

        self.query_result_size = Histogram(
            "salestrack_query_result_size",
            "Number of events returned per query",
            buckets=(0, 1, 5, 10, 50, 100, 500, 1000, 5000),
            registry=self.registry,
        )

    def record_event_created(self, event_type: str, value: Decimal):
        """Record an event creation."""
        self.events_created_total.labels(event_type=event_type).inc()
        self.event_value_total.labels(event_type=event_type).inc(float(value))

    def record_event_deleted(self):
        self.events_deleted_total.inc()

    def record_validation_failure(self, fields: list[str]):
        for field in fields:
            self.validation_failures_total.labels(field=field).inc()

    def record_query(self, result_size: int):
        self.query_result_size.observe(result_size)

    def mark_down(self):
        self.app_up.labels(service=self.service_name, version=self.version).set(0)
