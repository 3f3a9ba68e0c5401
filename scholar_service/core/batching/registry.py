"""Per-request loader registry.

One ``RequestLoaders`` is created per GraphQL request. It hands out a single
loader instance per ``LoaderIdentity`` so that every resolver asking for the
same access pattern shares one pending batch and one memo.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from scholar_service.core.batching.loaders import (
    BatchLoader,
    CountLoader,
    GroupLoader,
    LoaderIdentity,
    RecordLoader,
)

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable

    from scholar_service.core.batching.deferred import Deferred
    from scholar_service.core.batching.shapes import QueryShape
    from scholar_service.core.batching.store import StoreAdapter

L = TypeVar("L", bound=BatchLoader[Any, Any])


class RequestLoaders:
    """Registry of the loaders used while resolving one request.

    Usage:
        loaders = RequestLoaders(store)
        item = loaders.load_one(Item, "qt1")
        authors = loaders.load_group(author_shape, "item_id", "qt1")
        n_items = loaders.load_count(unit_items_shape, "unit_id", "lbnl")
    """

    def __init__(self, store: StoreAdapter) -> None:
        self.store = store
        self._loaders: dict[LoaderIdentity, BatchLoader[Any, Any]] = {}

    def __len__(self) -> int:
        return len(self._loaders)

    def __iter__(self):
        return iter(list(self._loaders.values()))

    def get(self, loader_cls: type[L], *params: Any) -> L:
        """Return the loader for ``(loader_cls.kind, params)``, creating it once."""
        identity = LoaderIdentity(loader_cls.kind, params)
        loader = self._loaders.get(identity)
        if loader is None:
            loader = loader_cls(self.store, *params)
            self._loaders[identity] = loader
        return loader  # type: ignore[return-value]

    def load_one(self, model: type, key: Hashable, key_column: str = "id") -> Deferred[Any]:
        return self.get(RecordLoader, model, key_column).load(key)

    def load_many(
        self, model: type, keys: Iterable[Hashable], key_column: str = "id"
    ) -> Deferred[list[Any]]:
        return self.get(RecordLoader, model, key_column).load_many(keys)

    def load_group(
        self,
        shape: QueryShape,
        field: str,
        key: Hashable,
        limit: int | None = None,
    ) -> Deferred[Any]:
        return self.get(GroupLoader, shape, field, limit).load(key)

    def load_count(self, shape: QueryShape, field: str, key: Hashable) -> Deferred[Any]:
        return self.get(CountLoader, shape, field).load(key)

    def pending_loaders(self) -> list[BatchLoader[Any, Any]]:
        return [loader for loader in self._loaders.values() if loader.has_pending]

    def unresolved(self) -> dict[str, list[Any]]:
        """Loader identity → keys whose deferred values are still pending."""
        stuck: dict[str, list[Any]] = {}
        for identity, loader in self._loaders.items():
            keys = loader.unresolved_keys() + loader.pending_keys
            if keys:
                stuck[str(identity)] = keys
        return stuck


__all__ = ["RequestLoaders"]
