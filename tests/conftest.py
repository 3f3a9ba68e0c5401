"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings for running without external infrastructure
    - Database Fixtures: a seeded SQLite file database per test
    - GraphQL Fixtures: request context for ``schema.execute``
    - Application Fixtures: FastAPI app and HTTP client

The seeded repository is small but covers every relationship:

    root
    ├── lbnl (campus)
    │   ├── lbnl_rw (series)       items qt00000001, qt00000002
    │   └── lbnl_hidden (hidden)   item qt00000001
    └── jtest (journal)            issue 5/2, section 1 -> qt00000001

Items qt00000001..qt00000006 are published; qt00000007 is withdrawn. Three
items share the same ``added`` date so keyset resumption over duplicate
ordering values is exercised.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import date, datetime
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from scholar_service.core.batching import SqlAlchemyStore
    from scholar_service.features.graphql.context import GraphQLContext

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_FRONTEND_URL", "https://site.test")
os.environ.setdefault("APP_CONTENT_URL", "https://content.test")
os.environ.setdefault("LOG_JSON_LOGS", "false")

PUBLISHED_IDS = [f"qt0000000{n}" for n in range(1, 7)]


# ============================================================================
# Seed data
# ============================================================================


def seed_rows() -> list:
    """Build the rows of the test repository."""
    from scholar_service.features.items.models import (
        Issue,
        Item,
        ItemAuthor,
        ItemContrib,
        Person,
        Section,
        Unit,
        UnitHier,
        UnitItem,
    )

    def item(n: int, added: date, **kwargs) -> Item:
        values = {
            "id": f"qt0000000{n}",
            "source": "oa_harvester",
            "status": "published",
            "title": f"Item {n}",
            "genre": "article",
            "added": added,
            "published": date(2019, 12, n),
            "updated": datetime(2020, 6, n, 12, 0, 0),
            "attrs": {},
        }
        values.update(kwargs)
        return Item(**values)

    return [
        Unit(id="root", name="Repository", type="root", status="active"),
        Unit(id="lbnl", name="Lawrence Berkeley National Laboratory", type="campus", status="active"),
        Unit(id="lbnl_rw", name="LBNL Research Works", type="series", status="active"),
        Unit(id="lbnl_hidden", name="Hidden Series", type="series", status="hidden"),
        Unit(
            id="jtest",
            name="Journal of Tests",
            type="journal",
            status="active",
            attrs={"issn": "1234-5678"},
        ),
        UnitHier(unit_id="lbnl", ancestor_unit="root", ordering=1, is_direct=True),
        UnitHier(unit_id="jtest", ancestor_unit="root", ordering=2, is_direct=True),
        UnitHier(unit_id="lbnl_rw", ancestor_unit="lbnl", ordering=1, is_direct=True),
        UnitHier(unit_id="lbnl_hidden", ancestor_unit="lbnl", ordering=2, is_direct=True),
        UnitHier(unit_id="lbnl_rw", ancestor_unit="root", is_direct=False),
        UnitHier(unit_id="lbnl_hidden", ancestor_unit="root", is_direct=False),
        Issue(id=10, unit_id="jtest", volume="5", issue="2", published=date(2020, 1, 1)),
        Issue(id=11, unit_id="jtest", volume="6", issue="1", published=date(2021, 1, 1)),
        Section(id=1, issue_id=10, name="Articles", ordering=1),
        item(
            1,
            date(2020, 1, 1),
            content_type="application/pdf",
            section=1,
            rights="cc-by",
            attrs={
                "abstract": "Soil and food.",
                "keywords": ["Food Science", "soil"],
                "subjects": ["Ecology"],
                "disciplines": ["Life Sciences"],
                "grants": [{"name": "USDOE"}],
                "doi": "https://doi.org/10.1234/abc.1",
                "local_ids": [{"type": "lbnl", "id": "LBNL-1001"}],
                "content_length": 2048,
                "content_version": "publisher_version",
                "ext_journal": {"fpage": "10", "lpage": "20"},
                "supp_files": [{"file": "data.csv", "mimeType": "text/csv", "size": 12}],
            },
        ),
        item(
            2,
            date(2020, 1, 1),
            genre="dissertation",
            source="ojs",
            attrs={"disciplines": ["Engineering"]},
        ),
        item(3, date(2020, 1, 1), attrs={"keywords": ["food waste"]}),
        item(4, date(2020, 2, 1)),
        item(5, date(2020, 2, 1), attrs={"ext_journal": {"name": "Outside Journal", "issn": "9999-0000"}}),
        item(6, date(2020, 3, 1)),
        item(7, date(2020, 4, 1), status="withdrawn"),
        UnitItem(unit_id="lbnl_rw", item_id="qt00000001", ordering_of_units=0, is_direct=True),
        UnitItem(unit_id="lbnl_hidden", item_id="qt00000001", ordering_of_units=1, is_direct=True),
        UnitItem(unit_id="jtest", item_id="qt00000001", ordering_of_units=2, is_direct=True),
        UnitItem(unit_id="lbnl", item_id="qt00000001", ordering_of_units=0, is_direct=False),
        UnitItem(unit_id="lbnl_rw", item_id="qt00000002", ordering_of_units=0, is_direct=True),
        UnitItem(unit_id="lbnl", item_id="qt00000002", ordering_of_units=0, is_direct=False),
        Person(id="p1", attrs={"email": "Jane@Example.org", "ORCID_id": "0000-0001"}),
        ItemAuthor(
            item_id="qt00000001",
            ordering=1,
            person_id="p1",
            attrs={
                "name": "Doe, Jane",
                "fname": "Jane",
                "lname": "Doe",
                "email": "jane@example.org",
                "ORCID_id": "0000-0001",
            },
        ),
        ItemAuthor(
            item_id="qt00000001",
            ordering=2,
            attrs={"name": "Roe, Rich", "lname": "Roe", "lbnl_id": "L77"},
        ),
        ItemAuthor(item_id="qt00000001", ordering=3, attrs={"name": "Poe, Ed"}),
        ItemAuthor(
            item_id="qt00000002",
            ordering=1,
            person_id="p1",
            attrs={"name": "Doe, J.", "fname": "J.", "lname": "Doe"},
        ),
        ItemAuthor(
            item_id="qt00000003",
            ordering=1,
            attrs={"name": "Roe, R.", "lbnl_id": "L77"},
        ),
        ItemContrib(item_id="qt00000002", ordering=1, role="advisor", attrs={"name": "Smith, Ann"}),
    ]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine(tmp_path, monkeypatch) -> AsyncGenerator[AsyncEngine]:
    """Create the process engine against a fresh, seeded SQLite file.

    ``DB_DSN`` is pointed at the file before the engine is first built, so
    the HTTP app and the GraphQL context share the same database.

    Yields:
        Async SQLAlchemy engine with every table created and seeded.
    """
    from scholar_service.core.database import Base
    from scholar_service.core.settings import clear_all_caches
    from scholar_service.infra.database import dispose_engine, get_engine, get_session_factory

    monkeypatch.setenv("DB_DSN", f"sqlite+aiosqlite:///{tmp_path / 'repository.db'}")
    clear_all_caches()
    get_session_factory.cache_clear()
    get_engine.cache_clear()

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session_factory()() as session:
        session.add_all(seed_rows())
        await session.commit()

    try:
        yield engine
    finally:
        await dispose_engine()
        clear_all_caches()


@pytest.fixture
def store(db_engine: AsyncEngine) -> SqlAlchemyStore:
    """Store adapter over the seeded database."""
    from scholar_service.core.batching import SqlAlchemyStore
    from scholar_service.infra.database import get_session_factory

    return SqlAlchemyStore(get_session_factory())


@pytest.fixture
def counting_store(store: SqlAlchemyStore) -> SqlAlchemyStore:
    """Store adapter that records a description of every batched call."""
    calls: list[str] = []
    original = {
        name: getattr(store, name) for name in ("fetch_by_keys", "count_by_keys", "fetch_grouped")
    }

    def _wrap(name: str):
        async def _call(*args, **kwargs):
            calls.append(name)
            return await original[name](*args, **kwargs)

        return _call

    for name in original:
        setattr(store, name, _wrap(name))
    store.calls = calls  # type: ignore[attr-defined]
    return store


# ============================================================================
# GraphQL Fixtures
# ============================================================================


@pytest.fixture
def graphql_context(store: SqlAlchemyStore) -> GraphQLContext:
    """Request context as the router would build it, minus the HTTP objects."""
    from scholar_service.core.settings import AppSettings, GraphQLSettings, PaginationSettings
    from scholar_service.features.graphql.context import GraphQLContext
    from scholar_service.features.graphql.dataloaders import create_dataloaders

    loaders = create_dataloaders(store, GraphQLSettings())
    return GraphQLContext(
        store=store,
        loaders=loaders.registry,
        scheduler=loaders.scheduler,
        app_settings=AppSettings(frontend_url="https://site.test", content_url="https://content.test"),
        pagination=PaginationSettings(),
        request_id="test-request",
    )


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(db_engine: AsyncEngine):
    """Create FastAPI application bound to the seeded database."""
    from scholar_service.app.main import create_app

    return create_app()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client talking to the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
