"""Prometheus metrics for the Fabric Telemetry API.

Metrics are exposed at the /metrics endpoint.

Metrics Categories:
- HTTP request metrics (latency, count, in-flight)
- Discovery metrics (outcome counts, duration)
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
APP_INFO = Info("fabric_app", "Fabric telemetry application information")

# HTTP Request metrics
HTTP_REQUESTS_TOTAL = Counter(
    "fabric_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "fabric_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "fabric_http_requests_in_progress",
    "Number of HTTP requests currently in progress",
    ["method", "endpoint"],
)

# Discovery metrics
DISCOVERY_REQUESTS_TOTAL = Counter(
    "fabric_discovery_requests_total",
    "Total fabric discovery requests",
    ["outcome"],  # found, not_found, error
)

DISCOVERY_DURATION_SECONDS = Histogram(
    "fabric_discovery_duration_seconds",
    "Fabric discovery duration in seconds",
    ["outcome"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)


def set_app_info(version: str, environment: str) -> None:
    """Set application info metric.

    Args:
        version: Application version string.
        environment: Deployment environment (development, staging, production).
    """
    APP_INFO.info({"version": version, "environment": environment})


def record_discovery(outcome: str, duration_seconds: float) -> None:
    """Record a completed discovery.

    Args:
        outcome: found, not_found or error.
        duration_seconds: Time from span start to span end.
    """
    DISCOVERY_REQUESTS_TOTAL.labels(outcome=outcome).inc()
    DISCOVERY_DURATION_SECONDS.labels(outcome=outcome).observe(duration_seconds)
