"""Request-scoped batching: deferred values, loaders and the resolution scheduler."""

from scholar_service.core.batching.deferred import (
    ABSENT,
    Deferred,
    DeferredPendingError,
    DeferredState,
    is_absent,
)
from scholar_service.core.batching.loaders import (
    BatchLoader,
    CountLoader,
    GroupLoader,
    LoaderIdentity,
    RecordLoader,
)
from scholar_service.core.batching.registry import RequestLoaders
from scholar_service.core.batching.scheduler import ResolutionScheduler
from scholar_service.core.batching.shapes import ColumnFilter, OrderTerm, QueryShape
from scholar_service.core.batching.store import SqlAlchemyStore, StoreAdapter

__all__ = [
    "ABSENT",
    "BatchLoader",
    "ColumnFilter",
    "CountLoader",
    "Deferred",
    "DeferredPendingError",
    "DeferredState",
    "GroupLoader",
    "LoaderIdentity",
    "OrderTerm",
    "QueryShape",
    "RecordLoader",
    "RequestLoaders",
    "ResolutionScheduler",
    "SqlAlchemyStore",
    "StoreAdapter",
    "is_absent",
]
