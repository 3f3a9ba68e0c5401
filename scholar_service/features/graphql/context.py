"""GraphQL context for request-scoped dependencies.

The context is created fresh for each GraphQL request and provides:
- Store adapter (for listings and point lookups)
- Loader registry and resolution scheduler (for batching)
- Link-building and pagination settings
- Request ID (for log correlation)

Following Strawberry's FastAPI integration pattern:
https://strawberry.rocks/docs/integrations/fastapi#context_getter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from strawberry.fastapi import BaseContext

from scholar_service.core.batching import is_absent

if TYPE_CHECKING:
    from starlette.background import BackgroundTasks
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.websockets import WebSocket

    from scholar_service.core.batching import (
        Deferred,
        RequestLoaders,
        ResolutionScheduler,
        SqlAlchemyStore,
    )
    from scholar_service.core.settings import AppSettings, PaginationSettings


@dataclass
class GraphQLContext(BaseContext):
    """Request context for GraphQL operations.

    Standard fields (per Strawberry docs):
    - request: The HTTP request (or None when executing directly)
    - response: The HTTP response
    - background_tasks: FastAPI BackgroundTasks

    Custom fields:
    - store: Store adapter for the request
    - loaders: Loader registry (one loader per access pattern)
    - scheduler: Drives loader flushes until deferred values settle
    - app_settings: Frontend and content URLs for links
    - pagination: Page size limits and cursor version
    - request_id: For log correlation

    Example usage in resolver:
        @strawberry.field
        async def journal(self, info: Info) -> str | None:
            ctx: GraphQLContext = info.context
            section = ctx.loaders.load_one(Section, self.model.section)
            return await ctx.resolve(section.then_present(lambda s: s.name))
    """

    # Standard Strawberry/FastAPI context fields
    request: Request | WebSocket | None = None
    response: Response | None = None
    background_tasks: BackgroundTasks | None = None

    # Custom application fields
    store: SqlAlchemyStore = field(default=None)  # type: ignore[assignment]
    loaders: RequestLoaders = field(default=None)  # type: ignore[assignment]
    scheduler: ResolutionScheduler = field(default=None)  # type: ignore[assignment]
    app_settings: AppSettings = field(default=None)  # type: ignore[assignment]
    pagination: PaginationSettings = field(default=None)  # type: ignore[assignment]
    request_id: str | None = None

    async def resolve(self, value: Deferred[Any] | Any) -> Any:
        """Wait for a deferred value; ``ABSENT`` becomes ``None``."""
        result = await self.scheduler.resolve(value)
        return None if is_absent(result) else result


__all__ = ["GraphQLContext"]
