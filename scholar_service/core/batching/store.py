"""Store adapter: the batched query shapes the loaders depend on.

Loaders never build SQL for a single key. They hand the adapter a whole
batch of keys and receive rows back for all of them at once:

- ``fetch_by_keys``: rows whose key column is in the set
- ``count_by_keys``: ``count(*)`` grouped by the key column
- ``fetch_grouped``: every matching row, in the shape's order

``SqlAlchemyStore`` implements the contract against an async SQLAlchemy
engine. Each call checks a session out of the session factory, so calls made
in one scheduler round can run concurrently against the connection pool.
It also executes whole statements (``fetch_all``, ``fetch_first``,
``count``) for listings and single-record lookups.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from scholar_service.core.exceptions import StoreError, StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Hashable, Mapping, Sequence
    from contextlib import AbstractAsyncContextManager

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from scholar_service.core.batching.shapes import QueryShape

logger = logging.getLogger(__name__)


@runtime_checkable
class StoreAdapter(Protocol):
    """Query-shape contract consumed by batch loaders."""

    supports_concurrency: bool

    async def fetch_by_keys(
        self, model: type, key_column: str, keys: Sequence[Hashable]
    ) -> Sequence[Any]: ...

    async def count_by_keys(
        self, shape: QueryShape, key_column: str, keys: Sequence[Hashable]
    ) -> Mapping[Hashable, int]: ...

    async def fetch_grouped(
        self, shape: QueryShape, key_column: str, keys: Sequence[Hashable]
    ) -> Sequence[Any]: ...


class SqlAlchemyStore:
    """Store adapter backed by SQLAlchemy async sessions.

    Usage:
        store = SqlAlchemyStore(AsyncSessionLocal)
        rows = await store.fetch_by_keys(Item, "id", ["qt1", "qt2"])

        # Sharing the request session serializes calls
        store = SqlAlchemyStore.from_session(session)
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
        *,
        supports_concurrency: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self.supports_concurrency = supports_concurrency

    @classmethod
    def from_session(cls, session: AsyncSession) -> SqlAlchemyStore:
        """Build a store that reuses one session for every call."""

        @asynccontextmanager
        async def _shared() -> AsyncIterator[AsyncSession]:
            yield session

        return cls(_shared, supports_concurrency=False)

    @asynccontextmanager
    async def _session(self, description: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except PoolTimeoutError as exc:
            logger.warning(
                "Connection pool exhausted",
                extra={"query": description},
            )
            msg = "No database connection available; retry the request"
            raise StoreUnavailableError(msg, extra={"query": description}) from exc
        except SQLAlchemyError as exc:
            logger.exception("Batched query failed", extra={"query": description})
            msg = f"Batched query failed: {description}"
            raise StoreError(msg, extra={"query": description}) from exc

    async def fetch_by_keys(
        self, model: type, key_column: str, keys: Sequence[Hashable]
    ) -> Sequence[Any]:
        col = getattr(model, key_column)
        stmt = select(model).where(col.in_(list(keys)))
        async with self._session(f"{model.__name__}.{key_column} in set") as session:
            result = await session.execute(stmt)
            return result.scalars().all()

    async def count_by_keys(
        self, shape: QueryShape, key_column: str, keys: Sequence[Hashable]
    ) -> Mapping[Hashable, int]:
        col = getattr(shape.model, key_column)
        stmt = select(col, func.count()).where(col.in_(list(keys))).group_by(col)
        for flt in shape.filters:
            stmt = stmt.where(flt.to_clause(shape.model))
        async with self._session(f"count {shape} group by {key_column}") as session:
            result = await session.execute(stmt)
            return {key: count for key, count in result.all()}

    async def fetch_grouped(
        self, shape: QueryShape, key_column: str, keys: Sequence[Hashable]
    ) -> Sequence[Any]:
        col = getattr(shape.model, key_column)
        stmt = shape.to_select().where(col.in_(list(keys)))
        async with self._session(f"{shape} where {key_column} in set") as session:
            result = await session.execute(stmt)
            return result.scalars().all()

    # ------------------------------------------------------------------
    # Statement execution for listings and lookups
    # ------------------------------------------------------------------

    async def fetch_all(self, stmt: Select[Any], description: str) -> Sequence[Any]:
        async with self._session(description) as session:
            result = await session.execute(stmt)
            return result.scalars().all()

    async def fetch_first(self, stmt: Select[Any], description: str) -> Any | None:
        async with self._session(description) as session:
            result = await session.execute(stmt.limit(1))
            return result.scalars().first()

    async def count(self, stmt: Select[Any], description: str) -> int:
        """Count the rows ``stmt`` would return, ignoring its ordering."""
        counted = select(func.count()).select_from(stmt.order_by(None).subquery())
        async with self._session(description) as session:
            result = await session.execute(counted)
            return int(result.scalar_one())


__all__ = ["SqlAlchemyStore", "StoreAdapter"]
