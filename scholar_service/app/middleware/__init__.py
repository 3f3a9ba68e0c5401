"""HTTP middleware and its registration order."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

from scholar_service.app.middleware.metrics import MetricsMiddleware
from scholar_service.app.middleware.request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


def configure_middleware(app: FastAPI) -> None:
    """Configure middleware for the application.

    Starlette runs the last added middleware first, so the request ID is
    set before metrics and CORS handling see the request.

    Args:
        app: FastAPI application instance.
    """
    # Public read-only API; any origin may query it
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    logger.debug("Middleware configured")


__all__ = ["MetricsMiddleware", "RequestIDMiddleware", "configure_middleware"]
