"""In-memory store adapter with call recording, for loader and scheduler tests."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Row:
    """A stored record; attributes are looked up like ORM columns."""

    id: Any
    name: str = ""
    parent_id: Any = None
    item_id: Any = None
    ordering: int = 0


class Thing:
    """Model marker for the fake store."""


class Parent:
    """Second model marker, for multi-hop chains."""


class Member:
    """Grouped rows keyed by ``item_id``."""


@dataclass
class FakeStore:
    """Store adapter keeping rows in memory and recording every call.

    Attributes:
        rows: Model -> stored rows
        calls: ``(method, model, key_column, keys)`` per adapter call
        error: Raised by every call when set
    """

    rows: dict[type, list[Row]] = field(default_factory=lambda: defaultdict(list))
    calls: list[tuple[str, type, str, list[Any]]] = field(default_factory=list)
    error: Exception | None = None
    supports_concurrency: bool = True

    def add(self, model: type, *rows: Row) -> None:
        self.rows[model].extend(rows)

    def _record(self, method: str, model: type, key_column: str, keys: Any) -> list[Row]:
        self.calls.append((method, model, key_column, list(keys)))
        if self.error is not None:
            raise self.error
        wanted = set(keys)
        return [row for row in self.rows[model] if getattr(row, key_column) in wanted]

    async def fetch_by_keys(self, model, key_column, keys):
        return self._record("fetch_by_keys", model, key_column, keys)

    async def count_by_keys(self, shape, key_column, keys):
        counts: dict[Any, int] = defaultdict(int)
        for row in self._record("count_by_keys", shape.model, key_column, keys):
            counts[getattr(row, key_column)] += 1
        return dict(counts)

    async def fetch_grouped(self, shape, key_column, keys):
        rows = self._record("fetch_grouped", shape.model, key_column, keys)
        return sorted(rows, key=lambda row: (getattr(row, key_column), row.ordering))
