"""Prometheus metrics for the service."""

from scholar_service.infra.metrics.prometheus import (
    REGISTRY,
    database_connections_active,
    http_request_duration_seconds,
    http_requests_total,
    listing_pages_total,
    loader_batch_size,
    loader_flush_duration_seconds,
    loader_flushes_total,
    scheduler_failures_total,
    scheduler_passes_total,
)

__all__ = [
    "REGISTRY",
    "database_connections_active",
    "http_request_duration_seconds",
    "http_requests_total",
    "listing_pages_total",
    "loader_batch_size",
    "loader_flush_duration_seconds",
    "loader_flushes_total",
    "scheduler_failures_total",
    "scheduler_passes_total",
]
