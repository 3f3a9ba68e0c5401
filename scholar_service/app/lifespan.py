"""Application lifespan management.

Startup: logging first, then a best-effort database probe.
Shutdown: dispose the engine pool; the log queue is flushed at exit.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from scholar_service.core.settings import get_app_settings
from scholar_service.infra.database import check_database, dispose_engine
from scholar_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of application services.

    A database that is down at startup is logged, not fatal: ``/chk`` keeps
    reporting it and requests fail per field until it comes back.

    Args:
        app: FastAPI application instance.
    """
    setup_logging()
    settings = get_app_settings()
    logger.info(
        "Starting %s",
        settings.service_name,
        extra={"version": settings.version, "environment": settings.environment},
    )

    if not await check_database():
        logger.warning("Database unreachable at startup")

    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.service_name)
        await dispose_engine()


__all__ = ["lifespan"]
