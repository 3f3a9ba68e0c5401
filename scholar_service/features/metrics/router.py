"""Prometheus metrics endpoint for observability.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    HTTP Request Metrics:
        - http_requests_total - Total request count by method, path, status
        - http_request_duration_seconds - Request latency histogram with exemplars

    Batching Metrics:
        - loader_flushes_total / loader_batch_size - Batched fetches per loader kind
        - scheduler_passes_total / scheduler_failures_total - Resolution rounds
        - listing_pages_total - Pages served by cursor listings
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from scholar_service.infra.metrics import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics from the service registry.

    Returns:
        Response with Prometheus metrics in text exposition format.
    """
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
