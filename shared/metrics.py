"""Prometheus metrics for the sleep journal service.

Counters on the write path, counters and histograms on the API.
Exposed via /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, make_asgi_app

# Write path
sleep_logs_written_total = Counter(
    "sleep_logs_written_total",
    "Total sleep logs written",
    ["status"],  # status: created, updated, deleted, rejected
)

validation_failures_total = Counter(
    "validation_failures_total",
    "Total validation failures by rule",
    ["rule"],
)

# API counters
api_requests_total = Counter(
    "api_requests_total",
    "Total API requests",
    ["endpoint", "method", "status_code"],
)

# Histograms
api_response_duration_seconds = Histogram(
    "api_response_duration_seconds",
    "Duration of API responses",
    ["endpoint"],
)


def create_metrics_app():
    """Create ASGI app for /metrics endpoint."""
    return make_asgi_app()
