"""Metrics middleware for HTTP request instrumentation with trace correlation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from scholar_service.infra.metrics import http_request_duration_seconds, http_requests_total

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import Request, Response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request counts and durations per route template.

    When an OpenTelemetry span is active its trace ID is attached as an
    exemplar so a latency sample links back to its trace.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        method = request.method
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = f"{time.perf_counter() - start_time:.6f}"
            return response
        finally:
            duration = time.perf_counter() - start_time
            # Route template keeps label cardinality low
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)

            exemplar = None
            span_context = trace.get_current_span().get_span_context()
            if span_context.is_valid:
                exemplar = {"trace_id": format(span_context.trace_id, "032x")}

            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                duration, exemplar=exemplar
            )
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=status_code
            ).inc(exemplar=exemplar)
