"""Loader container and factory.

Loaders batch and cache store lookups within a single request, preventing
N+1 query problems common in GraphQL resolvers.

Each GraphQL request gets its own registry and scheduler to ensure proper
batching boundaries and cache isolation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from scholar_service.core.batching import RequestLoaders, ResolutionScheduler

if TYPE_CHECKING:
    from scholar_service.core.batching import StoreAdapter
    from scholar_service.core.settings import GraphQLSettings


@dataclass
class DataLoaders:
    """Request-scoped loader registry plus the scheduler that flushes it.

    Usage in resolver:
        ctx = info.context
        unit = await ctx.resolve(ctx.loaders.load_one(Unit, "lbnl"))
    """

    registry: RequestLoaders
    scheduler: ResolutionScheduler


def create_dataloaders(store: StoreAdapter, settings: GraphQLSettings) -> DataLoaders:
    """Factory for creating request-scoped loaders.

    Args:
        store: Store adapter for the current request
        settings: Scheduler limits

    Returns:
        DataLoaders with an empty registry and a fresh scheduler
    """
    registry = RequestLoaders(store)
    scheduler = ResolutionScheduler(
        registry,
        max_passes=settings.max_scheduler_passes,
        settle_ticks=settings.settle_ticks,
        concurrent_flush=settings.concurrent_flush,
    )
    return DataLoaders(registry=registry, scheduler=scheduler)


__all__ = ["DataLoaders", "create_dataloaders"]
