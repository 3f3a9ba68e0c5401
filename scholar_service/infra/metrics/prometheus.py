"""Prometheus metrics for request handling and batched resolution."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Create custom registry for better control
REGISTRY = CollectorRegistry()

# Covers response times from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

# Keys per batched fetch
BATCH_SIZE_BUCKETS = (1, 2, 5, 10, 25, 50, 100, 250, 500, 1000)

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# Database metrics
database_connections_active = Gauge(
    "database_connections_active",
    "Open connections held by the database pool",
    registry=REGISTRY,
)

# Batch loader metrics
loader_flushes_total = Counter(
    "loader_flushes_total",
    "Batched fetches executed by request-scoped loaders",
    ["kind", "outcome"],
    registry=REGISTRY,
)

loader_batch_size = Histogram(
    "loader_batch_size",
    "Number of distinct keys per batched fetch",
    ["kind"],
    buckets=BATCH_SIZE_BUCKETS,
    registry=REGISTRY,
)

loader_flush_duration_seconds = Histogram(
    "loader_flush_duration_seconds",
    "Duration of one batched fetch in seconds",
    ["kind"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# Scheduler metrics
scheduler_passes_total = Counter(
    "scheduler_passes_total",
    "Resolution scheduler passes that flushed at least one loader",
    registry=REGISTRY,
)

scheduler_failures_total = Counter(
    "scheduler_failures_total",
    "Resolutions aborted by the scheduler",
    ["reason"],
    registry=REGISTRY,
)

# Listing metrics
listing_pages_total = Counter(
    "listing_pages_total",
    "Pages served by cursor-paginated listings",
    ["listing", "resumed"],
    registry=REGISTRY,
)
