"""Health check endpoint for load balancers and uptime probes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from scholar_service.infra.database import check_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/chk",
    response_class=PlainTextResponse,
    summary="Service health check",
    description="Returns 'ok' when the service can reach its database",
)
async def chk() -> PlainTextResponse:
    """Probe the database and report plain-text status.

    Returns:
        ``ok`` with 200, or ``database unavailable`` with 503.
    """
    if await check_database():
        return PlainTextResponse("ok")
    logger.warning("Health check failed: database unreachable")
    return PlainTextResponse(
        "database unavailable",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
