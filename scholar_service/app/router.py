"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scholar_service.core.settings import get_graphql_settings
from scholar_service.features.health.router import router as health_router
from scholar_service.features.metrics.router import router as metrics_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from scholar_service.core.settings import GraphQLSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, graphql_settings: GraphQLSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        graphql_settings: Optional override controlling GraphQL availability.
    """
    graphql_settings = graphql_settings or get_graphql_settings()

    app.include_router(health_router)
    app.include_router(metrics_router)

    if graphql_settings.enabled:
        from scholar_service.features.graphql.router import create_graphql_router

        app.include_router(create_graphql_router(), prefix=graphql_settings.path, tags=["graphql"])
        logger.info("GraphQL endpoint enabled at %s", graphql_settings.path)
    else:
        logger.info("GraphQL endpoint disabled")


__all__ = ["setup_routers"]
