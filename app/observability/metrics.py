"""Prometheus metrics for the demo API.

All collectors live on a dedicated registry so tests and the ``/metrics``
endpoint only see what this application defines.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from prometheus_client import CONTENT_TYPE_LATEST


REGISTRY = CollectorRegistry()

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status"],
    registry=REGISTRY,
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "path"],
    registry=REGISTRY,
)
http_request_size_bytes = Histogram(
    "http_request_size_bytes",
    "Size of HTTP requests in bytes",
    ["method", "path"],
    buckets=[100, 500, 1000, 5000, 10000, 50000, 100000],
    registry=REGISTRY,
)

orders_processed_total = Counter(
    "orders_processed_total",
    "Total number of orders processed",
    registry=REGISTRY,
)
users_registered_total = Counter(
    "users_registered_total",
    "Total number of users registered",
    registry=REGISTRY,
)
products_viewed_total = Counter(
    "products_viewed_total",
    "Total number of product views",
    ["product_id"],
    registry=REGISTRY,
)

errors_total = Counter(
    "errors_total",
    "Total number of errors",
    ["type", "endpoint"],
    registry=REGISTRY,
)

active_requests = Gauge(
    "active_requests",
    "Number of active requests",
    registry=REGISTRY,
)
response_time_95_percentile = Gauge(
    "response_time_95_percentile",
    "95th percentile of response time",
    registry=REGISTRY,
)


def observe_http_request(method: str, path: str, status: int, elapsed_s: float, size_bytes: int | None = None) -> None:
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(elapsed_s)
    if size_bytes is not None and size_bytes > 0:
        http_request_size_bytes.labels(method=method, path=path).observe(size_bytes)


def record_order() -> None:
    orders_processed_total.inc()


def record_user_registration() -> None:
    users_registered_total.inc()


def record_product_view(product_id: str) -> None:
    products_viewed_total.labels(product_id=product_id).inc()


def record_error(error_type: str, endpoint: str) -> None:
    errors_total.labels(type=error_type, endpoint=endpoint).inc()


def set_response_time_95(value: float) -> None:
    response_time_95_percentile.set(value)


def render_latest() -> tuple[bytes, str]:
    """Exposition payload and content type for the scrape endpoint."""

    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
