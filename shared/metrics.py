"""
Shared metrics configuration for the dashboard gateway.
"""

from typing import Dict, Any, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, Info, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so several apps can live in one process
    (tests build a fresh app per case).
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        if self.service_name == "gateway":
            self._setup_gateway_metrics()

    def _setup_gateway_metrics(self):
        """Set up gateway-specific metrics."""
        self._metrics["backend_requests_total"] = Counter(
            "backend_requests_total",
            "Total outbound backend calls",
            ["pool", "outcome"],
            registry=self.registry
        )

        self._metrics["backend_request_duration_seconds"] = Histogram(
            "backend_request_duration_seconds",
            "Outbound backend call duration in seconds",
            ["pool"],
            registry=self.registry
        )

        self._metrics["gateway_route_failures_total"] = Counter(
            "gateway_route_failures_total",
            "Total gateway route failures",
            ["route", "status"],
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record an inbound HTTP request."""
        self._metrics["http_requests_total"].labels(
            method=method, endpoint=endpoint, status_code=str(status_code)
        ).inc()
        self._metrics["http_request_duration_seconds"].labels(
            method=method, endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record a health check."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_backend_call(self, pool: str, outcome: str, duration: float):
        """Record one outbound backend call."""
        if "backend_requests_total" not in self._metrics:
            return
        self._metrics["backend_requests_total"].labels(pool=pool, outcome=outcome).inc()
        self._metrics["backend_request_duration_seconds"].labels(pool=pool).observe(duration)

    def record_route_failure(self, route: str, status: int):
        """Record a route that answered with a failure envelope."""
        if "gateway_route_failures_total" not in self._metrics:
            return
        self._metrics["gateway_route_failures_total"].labels(route=route, status=str(status)).inc()

    def get_sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read the current value of a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels or {})

    def render(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
