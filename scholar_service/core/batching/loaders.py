"""Request-scoped batch loaders.

Loaders batch and cache store lookups within a single request, preventing
the N+1 query pattern of resolving a nested graph field by field.

Every loader follows the same contract:

- ``load(key)`` returns the memoized ``Deferred`` for the key, creating it
  and adding the key to the pending batch on first request. A key already
  pending or already resolved is never fetched again.
- A flush runs exactly one adapter call for the whole pending batch and
  settles every waiter: a value, ``ABSENT`` for keys the adapter did not
  return, or the adapter's error for all of them.

Flushing is split into ``take_batch`` / ``dispatch`` / ``settle`` so the
scheduler can run the I/O of several loaders concurrently and resolve the
waiters only after the whole round completes.

Kinds:
    RecordLoader: one row per key (``model.key_column IN keys``)
    CountLoader: ``count(*)`` grouped by a foreign key, ABSENT means zero
    GroupLoader: ordered rows grouped by a foreign key, optionally truncated
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Generic, NamedTuple, TypeVar

from scholar_service.core.batching.deferred import ABSENT, Deferred
from scholar_service.infra.metrics import (
    loader_batch_size,
    loader_flush_duration_seconds,
    loader_flushes_total,
)

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Mapping, Sequence

    from scholar_service.core.batching.shapes import QueryShape
    from scholar_service.core.batching.store import StoreAdapter

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class LoaderIdentity(NamedTuple):
    """Identifies a loader instance within a request: kind plus parameters."""

    kind: str
    params: tuple[Any, ...]

    def __str__(self) -> str:
        rendered = ", ".join(
            p.__name__ if isinstance(p, type) else str(p) for p in self.params
        )
        return f"{self.kind}({rendered})"


@dataclass
class PendingBatch:
    """Keys taken from a loader for one adapter call."""

    keys: list[Any]
    waiters: dict[Any, Deferred[Any]]


@dataclass
class BatchOutcome:
    """Result of one adapter call: a key→value mapping or the raised error."""

    values: Mapping[Any, Any] = field(default_factory=dict)
    error: Exception | None = None


class BatchLoader(ABC, Generic[K, V]):
    """Base class for request-scoped batching loaders.

    Subclasses set ``kind`` and implement ``batch_load``, which must return a
    mapping containing an entry for every key it found. Keys left out of the
    mapping resolve to ``ABSENT``.

    Usage:
        loader = RecordLoader(store, Item)
        d1 = loader.load("qt1")
        d2 = loader.load("qt1")   # same Deferred, no second fetch
        await loader.flush()
        d1.result()               # Item or ABSENT
    """

    kind: ClassVar[str] = "loader"

    def __init__(self, store: StoreAdapter, *params: Any) -> None:
        self._store = store
        self.identity = LoaderIdentity(self.kind, params)
        self._cache: dict[K, Deferred[V]] = {}
        self._pending: dict[K, Deferred[V]] = {}
        self.flush_count = 0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.identity} pending={len(self._pending)}>"

    @abstractmethod
    async def batch_load(self, keys: Sequence[K]) -> Mapping[K, V]:
        """Fetch values for every key in one adapter call."""

    # ------------------------------------------------------------------
    # Requesting keys
    # ------------------------------------------------------------------

    def load(self, key: K) -> Deferred[V]:
        """Request a value for ``key``.

        Returns the memoized deferred when the key was requested before in
        this request, whether it is still pending or already settled.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        deferred: Deferred[V] = Deferred(label=f"{self.identity}[{key!r}]")
        self._cache[key] = deferred
        self._pending[key] = deferred
        return deferred

    def load_many(self, keys: Iterable[K]) -> Deferred[list[V]]:
        return Deferred.all(self.load(key) for key in keys)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    @property
    def pending_keys(self) -> list[K]:
        return list(self._pending)

    def unresolved_keys(self) -> list[K]:
        """Keys whose deferred is pending but not queued for a flush."""
        return [
            key
            for key, deferred in self._cache.items()
            if deferred.is_pending and key not in self._pending
        ]

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def take_batch(self) -> PendingBatch | None:
        """Detach the pending keys; later loads start a new batch."""
        if not self._pending:
            return None
        waiters, self._pending = self._pending, {}
        return PendingBatch(keys=list(waiters), waiters=waiters)

    async def dispatch(self, batch: PendingBatch) -> BatchOutcome:
        """Run the single adapter call for ``batch``.

        Errors are captured in the outcome rather than raised so that one
        failing loader does not cancel the other calls of a round.
        """
        self.flush_count += 1
        loader_batch_size.labels(kind=self.kind).observe(len(batch.keys))
        logger.debug(
            "Flushing %s with %d key(s)",
            self.identity,
            len(batch.keys),
        )
        started = time.perf_counter()
        try:
            values = await self.batch_load(batch.keys)
        except Exception as exc:  # noqa: BLE001 - propagated to every waiter in settle()
            loader_flushes_total.labels(kind=self.kind, outcome="error").inc()
            logger.warning(
                "Batched fetch failed for %s",
                self.identity,
                extra={"loader": str(self.identity), "keys": len(batch.keys)},
                exc_info=exc,
            )
            return BatchOutcome(error=exc)
        finally:
            loader_flush_duration_seconds.labels(kind=self.kind).observe(
                time.perf_counter() - started
            )
        loader_flushes_total.labels(kind=self.kind, outcome="ok").inc()
        return BatchOutcome(values=values)

    def settle(self, batch: PendingBatch, outcome: BatchOutcome) -> None:
        """Resolve every waiter of ``batch`` exactly once."""
        if outcome.error is not None:
            for deferred in batch.waiters.values():
                deferred.reject(outcome.error)
            return
        for key, deferred in batch.waiters.items():
            deferred.fulfill(outcome.values.get(key, ABSENT))

    async def flush(self) -> None:
        """Fetch and settle the pending batch; no-op when nothing is pending."""
        batch = self.take_batch()
        if batch is None:
            return
        self.settle(batch, await self.dispatch(batch))


class RecordLoader(BatchLoader[Any, Any]):
    """Load single records by key (usually the primary key).

    Usage:
        unit = loaders.get(RecordLoader, Unit).load("lbnl_rw")
    """

    kind = "record"

    def __init__(self, store: StoreAdapter, model: type, key_column: str = "id") -> None:
        super().__init__(store, model, key_column)
        self.model = model
        self.key_column = key_column

    async def batch_load(self, keys: Sequence[Hashable]) -> Mapping[Hashable, Any]:
        rows = await self._store.fetch_by_keys(self.model, self.key_column, keys)
        return {getattr(row, self.key_column): row for row in rows}


class CountLoader(BatchLoader[Any, int]):
    """Count rows per foreign key.

    A key with no matching rows resolves to ``ABSENT``; callers treat that
    as zero.
    """

    kind = "count"

    def __init__(self, store: StoreAdapter, shape: QueryShape, key_column: str) -> None:
        super().__init__(store, shape, key_column)
        self.shape = shape
        self.key_column = key_column

    async def batch_load(self, keys: Sequence[Hashable]) -> Mapping[Hashable, int]:
        counts = await self._store.count_by_keys(self.shape, self.key_column, keys)
        return {key: count for key, count in counts.items() if count}


class GroupLoader(BatchLoader[Any, list[Any]]):
    """Load ordered groups of rows per foreign key.

    Rows are grouped in the order the shape sorts them; each group is cut
    to at most ``limit`` rows. A key with no rows resolves to ``ABSENT``,
    not to an empty list.
    """

    kind = "group"

    def __init__(
        self,
        store: StoreAdapter,
        shape: QueryShape,
        key_column: str,
        limit: int | None = None,
    ) -> None:
        super().__init__(store, shape, key_column, limit)
        self.shape = shape
        self.key_column = key_column
        self.limit = limit

    async def batch_load(self, keys: Sequence[Hashable]) -> Mapping[Hashable, list[Any]]:
        rows = await self._store.fetch_grouped(self.shape, self.key_column, keys)
        groups: dict[Hashable, list[Any]] = defaultdict(list)
        for row in rows:
            group = groups[getattr(row, self.key_column)]
            if self.limit is None or len(group) < self.limit:
                group.append(row)
        return dict(groups)


__all__ = [
    "BatchLoader",
    "BatchOutcome",
    "CountLoader",
    "GroupLoader",
    "LoaderIdentity",
    "PendingBatch",
    "RecordLoader",
]
