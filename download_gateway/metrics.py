"""Prometheus metrics for the download gateway."""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Upper buckets cover the extraction backend timeout.
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0)

HTTP_REQUESTS = Counter(
    "download_gateway_requests_total",
    "HTTP requests handled by the gateway",
    labelnames=["method", "route", "status"],
)
HTTP_LATENCY = Histogram(
    "download_gateway_request_duration_seconds",
    "Time spent handling a request",
    labelnames=["route"],
    buckets=LATENCY_BUCKETS,
)
DOWNLOAD_DECISIONS = Counter(
    "download_gateway_decisions_total",
    "Outcomes of download requests",
    labelnames=["outcome"],
)


def observe_request(method: str, route: str, status_code: int, duration: float) -> None:
    HTTP_REQUESTS.labels(method=method, route=route, status=str(status_code)).inc()
    HTTP_LATENCY.labels(route=route).observe(duration)


def record_decision(outcome: str) -> None:
    """Count a download outcome (accepted, rate_limited, invalid, ...)."""
    DOWNLOAD_DECISIONS.labels(outcome=outcome).inc()


def latest_metrics() -> bytes:
    return generate_latest()


__all__ = [
    "HTTP_REQUESTS",
    "HTTP_LATENCY",
    "DOWNLOAD_DECISIONS",
    "CONTENT_TYPE_LATEST",
    "observe_request",
    "record_decision",
    "latest_metrics",
]
