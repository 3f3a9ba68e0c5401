"""Keyset (seek) pagination over an ordered listing.

Instead of OFFSET, the next page seeks past the last row of the previous one:

    For ORDER BY added DESC, id DESC with boundary (d1, id1):
    WHERE (added < d1) OR (added = d1 AND id < id1)

The identifier is always appended as a tiebreaker in the same direction as
the ordering field, so the pair is a total order and rows sharing the same
field value are neither skipped nor repeated across pages.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from sqlalchemy import Date, DateTime, Integer, Select, and_, or_

from scholar_service.core.database.filters import StatementFilter
from scholar_service.core.pagination.schemas import Page
from scholar_service.infra.metrics import listing_pages_total

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import InstrumentedAttribute

    from scholar_service.core.batching.store import SqlAlchemyStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def boundary_value(value: Any) -> str | int | None:
    """Render an ordering value for storage inside a cursor."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class KeysetFilter(StatementFilter):
    """Order by (field, id) and seek past a resume boundary.

    Example:
        stmt = KeysetFilter(
            Item.added,
            Item.id,
            descending=True,
            last_value="2020-01-15",
            last_id="qt12345678",
        ).apply(stmt)

    Attributes:
        field: Ordering column
        id_column: Unique tiebreaker column
        descending: Sort direction for both columns
        last_value: Ordering value of the last row already returned
        last_id: Identifier of the last row already returned
    """

    def __init__(
        self,
        field: InstrumentedAttribute[Any],
        id_column: InstrumentedAttribute[Any],
        *,
        descending: bool = False,
        last_value: Any = None,
        last_id: Any = None,
    ) -> None:
        self.field = field
        self.id_column = id_column
        self.descending = descending
        self.last_value = last_value
        self.last_id = last_id

    @property
    def resuming(self) -> bool:
        return self.last_id is not None

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply ORDER BY and, when resuming, the seek condition."""
        if self.descending:
            statement = statement.order_by(self.field.desc(), self.id_column.desc())
        else:
            statement = statement.order_by(self.field.asc(), self.id_column.asc())
        if not self.resuming:
            return statement
        return statement.where(self.seek_condition())

    def seek_condition(self) -> Any:
        """Build ``field op v OR (field = v AND id op last_id)``."""
        value = convert_boundary(self.field, self.last_value)
        if self.descending:
            past_field = self.field < value
            past_id = self.id_column < self.last_id
        else:
            past_field = self.field > value
            past_id = self.id_column > self.last_id
        if value is None:
            return past_id
        return or_(past_field, and_(self.field == value, past_id))


def convert_boundary(column: InstrumentedAttribute[Any], value: Any) -> Any:
    """Convert a cursor-stored boundary back to the column's Python type.

    Handles the ISO strings written by ``boundary_value``.
    """
    if value is None or not isinstance(value, str):
        return value
    column_type = getattr(column.type, "impl", column.type)
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(value)
    if isinstance(column_type, Date):
        return date.fromisoformat(value)
    if isinstance(column_type, Integer):
        return int(value)
    return value


class KeysetListing(ABC, Generic[T]):
    """Lazy, memoized page of a keyset-paginated listing.

    Subclasses provide the base query (filters only, used for ``total``), the
    page query (base query plus ordering and seek condition) and the cursor
    pointing past a row. Each part is fetched at most once, on first use, so
    a GraphQL selection of only ``total`` never fetches the page.

    A full page implies ``more`` even when no rows remain; the next call then
    returns an empty page without ``more``.
    """

    listing: ClassVar[str] = "listing"

    def __init__(
        self,
        store: SqlAlchemyStore,
        base_query: Select[Any],
        page_query: Select[Any],
        first: int,
        *,
        resumed: bool = False,
    ) -> None:
        self.store = store
        self.base_query = base_query
        self.page_query = page_query
        self.first = first
        self.resumed = resumed
        self._lock = asyncio.Lock()
        self._total: int | None = None
        self._nodes: list[T] | None = None

    @abstractmethod
    def cursor_after(self, row: T) -> str:
        """Encode the cursor resuming just past ``row``."""

    async def total(self) -> int:
        async with self._lock:
            if self._total is None:
                self._total = await self.store.count(
                    self.base_query, f"{self.listing} total"
                )
        return self._total

    async def nodes(self) -> list[T]:
        async with self._lock:
            if self._nodes is None:
                rows: Sequence[T] = await self.store.fetch_all(
                    self.page_query.limit(self.first), f"{self.listing} page"
                )
                self._nodes = list(rows)
                listing_pages_total.labels(
                    listing=self.listing,
                    resumed=str(self.resumed).lower(),
                ).inc()
                logger.debug(
                    "Fetched %s page",
                    self.listing,
                    extra={"rows": len(self._nodes), "first": self.first, "resumed": self.resumed},
                )
        return self._nodes

    async def more(self) -> str | None:
        nodes = await self.nodes()
        if len(nodes) == self.first:
            return self.cursor_after(nodes[-1])
        return None

    async def page(self) -> Page[T]:
        return Page(total=await self.total(), nodes=await self.nodes(), more=await self.more())


__all__ = ["KeysetFilter", "KeysetListing", "boundary_value", "convert_boundary"]
