"""Fixtures for unit tests: loaders and scheduler over an in-memory store."""

from __future__ import annotations

import pytest

from scholar_service.core.batching import RequestLoaders, ResolutionScheduler
from tests.unit.fakes import FakeStore, Member, Parent, Row, Thing


@pytest.fixture
def fake_store() -> FakeStore:
    store = FakeStore()
    store.add(Thing, Row(5, "five", parent_id=1), Row(9, "nine", parent_id=2))
    store.add(Parent, Row(1, "one"), Row(2, "two"))
    store.add(
        Member,
        Row("a1", "first", item_id="qt1", ordering=1),
        Row("a2", "second", item_id="qt1", ordering=2),
        Row("a3", "third", item_id="qt1", ordering=3),
        Row("b1", "only", item_id="qt2", ordering=1),
    )
    return store


@pytest.fixture
def loaders(fake_store: FakeStore) -> RequestLoaders:
    return RequestLoaders(fake_store)


@pytest.fixture
def scheduler(loaders: RequestLoaders) -> ResolutionScheduler:
    return ResolutionScheduler(loaders, max_passes=10, settle_ticks=1)
