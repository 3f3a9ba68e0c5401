"""GraphQL router for FastAPI integration.

Provides:
- GraphQL endpoint at /graphql (mounted with prefix by app/router.py)
- GraphQL IDE options (GraphiQL, Apollo Sandbox, Pathfinder, or none)
- Request context with store, loaders and scheduler
"""

from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import APIRouter, BackgroundTasks, Request, Response
from strawberry.fastapi import GraphQLRouter

from scholar_service.core.batching import SqlAlchemyStore
from scholar_service.core.settings import (
    get_app_settings,
    get_graphql_settings,
    get_pagination_settings,
)
from scholar_service.features.graphql.context import GraphQLContext
from scholar_service.features.graphql.dataloaders import create_dataloaders
from scholar_service.features.graphql.schema import schema
from scholar_service.infra.database import get_session_factory
from scholar_service.infra.logging import get_log_context

logger = logging.getLogger(__name__)


async def get_graphql_context(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
) -> GraphQLContext:
    """Create GraphQL context from FastAPI dependencies.

    Every request gets its own store, loader registry and scheduler, so
    batches and caches never leak across requests.

    Args:
        request: FastAPI request
        response: FastAPI response (for setting headers)
        background_tasks: FastAPI background tasks

    Returns:
        GraphQLContext for use in resolvers
    """
    request_id = getattr(request.state, "request_id", None) or get_log_context().get("request_id")
    store = SqlAlchemyStore(get_session_factory())
    loaders = create_dataloaders(store, get_graphql_settings())

    return GraphQLContext(
        request=request,
        response=response,
        background_tasks=background_tasks,
        store=store,
        loaders=loaders.registry,
        scheduler=loaders.scheduler,
        app_settings=get_app_settings(),
        pagination=get_pagination_settings(),
        request_id=request_id,
    )


def create_graphql_router() -> APIRouter:
    """Create GraphQL router with settings-based configuration."""
    settings = get_graphql_settings()

    graphql_app = GraphQLRouter(
        schema,
        context_getter=cast("Any", get_graphql_context),
        graphql_ide=settings.graphql_ide or None,
        path="/",  # use root here; mounted prefix adds the actual path
    )

    router = APIRouter()
    router.include_router(graphql_app, prefix="")
    logger.debug("GraphQL router created (ide=%s)", settings.graphql_ide)
    return router


__all__ = ["create_graphql_router", "get_graphql_context"]
