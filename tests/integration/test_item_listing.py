"""Item and unit listings against the seeded database."""

from __future__ import annotations

import base64
import json
from datetime import datetime
from typing import TYPE_CHECKING

import pytest

from scholar_service.core.exceptions import InvalidCursorError, RequestError
from scholar_service.features.items.listings import UnitDescendantsListing
from scholar_service.features.items.models import ItemOrder, ItemStatus, UnitType
from scholar_service.features.items.planner import ItemArgs, ItemScope, plan_items
from tests.conftest import PUBLISHED_IDS

if TYPE_CHECKING:
    from scholar_service.core.batching import SqlAlchemyStore


async def ids(store: SqlAlchemyStore, args: ItemArgs, scope: ItemScope | None = None) -> list[str]:
    return [item.id for item in await plan_items(store, args, scope).nodes()]


async def collect_pages(store: SqlAlchemyStore, args: ItemArgs) -> list[list[str]]:
    """Follow ``more`` until a page comes back without one."""
    pages = []
    page = await plan_items(store, args).page()
    pages.append([item.id for item in page.nodes])
    while page.more is not None:
        page = await plan_items(store, ItemArgs(more=page.more)).page()
        pages.append([item.id for item in page.nodes])
    return pages


class TestItemListing:
    """Filtering and ordering of items."""

    async def test_total_ignores_page_size(self, store: SqlAlchemyStore) -> None:
        listing = plan_items(store, ItemArgs(first=2))

        assert await listing.total() == 6
        assert len(await listing.nodes()) == 2

    async def test_default_order_is_newest_first(self, store: SqlAlchemyStore) -> None:
        assert await ids(store, ItemArgs()) == list(reversed(PUBLISHED_IDS))

    async def test_pages_concatenate_without_gaps(self, store: SqlAlchemyStore) -> None:
        pages = await collect_pages(store, ItemArgs(first=2, order=ItemOrder.ADDED_ASC))

        assert pages == [PUBLISHED_IDS[0:2], PUBLISHED_IDS[2:4], PUBLISHED_IDS[4:6], []]

    async def test_page_boundary_inside_equal_values(self, store: SqlAlchemyStore) -> None:
        # qt1..qt3 share the same added date
        pages = await collect_pages(store, ItemArgs(first=4, order=ItemOrder.ADDED_ASC))

        assert pages == [PUBLISHED_IDS[0:4], PUBLISHED_IDS[4:6]]

    async def test_descending_pages(self, store: SqlAlchemyStore) -> None:
        pages = await collect_pages(store, ItemArgs(first=3))

        assert sum(pages, []) == list(reversed(PUBLISHED_IDS))
        assert pages[-1] == []

    async def test_continuation_keeps_filters(self, store: SqlAlchemyStore) -> None:
        page = await plan_items(store, ItemArgs(first=1, tags=["keyword:food"])).page()
        rest = await plan_items(store, ItemArgs(more=page.more)).page()

        assert page.total == rest.total == 2
        assert [i.id for i in page.nodes + rest.nodes] == ["qt00000003", "qt00000001"]

    async def test_include_withdrawn(self, store: SqlAlchemyStore) -> None:
        found = await ids(store, ItemArgs(include=[ItemStatus.WITHDRAWN]))

        assert found == ["qt00000007"]

    async def test_before_and_after_range(self, store: SqlAlchemyStore) -> None:
        args = ItemArgs(after=datetime(2020, 2, 1), before=datetime(2020, 3, 1))

        assert sorted(await ids(store, args)) == ["qt00000004", "qt00000005"]

    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("discipline:Life Sciences", ["qt00000001"]),
            ("discipline:Life", []),
            ("keyword:food", ["qt00000001", "qt00000003"]),
            ("keyword:FOOD WASTE", ["qt00000003"]),
            ("subject:ecol", ["qt00000001"]),
            ("grant:usdoe", ["qt00000001"]),
            ("type:ETD", ["qt00000002"]),
            ("type:ARTICLE", ["qt00000001", "qt00000003", "qt00000004", "qt00000005", "qt00000006"]),
            ("source:ojs", ["qt00000002"]),
        ],
    )
    async def test_tag_filters(
        self, store: SqlAlchemyStore, tag: str, expected: list[str]
    ) -> None:
        assert sorted(await ids(store, ItemArgs(tags=[tag]))) == expected

    async def test_tags_combine_with_and(self, store: SqlAlchemyStore) -> None:
        args = ItemArgs(tags=["keyword:food", "discipline:Life Sciences"])

        assert await ids(store, args) == ["qt00000001"]

    async def test_unit_scope_includes_sub_units(self, store: SqlAlchemyStore) -> None:
        found = await ids(store, ItemArgs(), ItemScope(unit_id="lbnl"))

        assert sorted(found) == ["qt00000001", "qt00000002"]

    async def test_person_scope(self, store: SqlAlchemyStore) -> None:
        found = await ids(store, ItemArgs(), ItemScope(person_id="p1"))

        assert sorted(found) == ["qt00000001", "qt00000002"]

    async def test_author_identifier_scope(self, store: SqlAlchemyStore) -> None:
        found = await ids(store, ItemArgs(), ItemScope(author_key="lbnl_id", author_id="L77"))

        assert sorted(found) == ["qt00000001", "qt00000003"]

    async def test_total_only_skips_page_query(self, store: SqlAlchemyStore) -> None:
        listing = plan_items(store, ItemArgs(tags=["source:ojs"]))

        assert await listing.total() == 1
        assert listing._nodes is None


def hand_built_cursor(query: dict) -> str:
    text = json.dumps({"v": 1, "q": query}, separators=(",", ":"))
    return base64.urlsafe_b64encode(text.encode()).decode().rstrip("=")


class TestResumeBoundary:
    """Cursors whose boundary cannot seek on the ordering column."""

    @pytest.mark.parametrize(
        "query",
        [
            {"order": "UPDATED_DESC", "last_value": "2020-13-45", "last_id": "qt00000003"},
            {"order": "ADDED_ASC", "last_value": "yesterday", "last_id": "qt00000003"},
            {"order": "ADDED_ASC", "last_value": "2020-01-01"},
            {"order": "ADDED_ASC", "last_id": "qt00000003"},
        ],
        ids=["impossible-date", "not-a-date", "value-without-id", "id-without-value"],
    )
    async def test_rejected_as_invalid_cursor(self, store: SqlAlchemyStore, query: dict) -> None:
        token = hand_built_cursor({"first": 2, **query})

        with pytest.raises(InvalidCursorError) as exc:
            plan_items(store, ItemArgs(more=token))

        assert exc.value.status_code == 400

    async def test_well_formed_boundary_resumes(self, store: SqlAlchemyStore) -> None:
        token = hand_built_cursor(
            {
                "first": 2,
                "order": "UPDATED_ASC",
                "last_value": "2020-06-04T12:00:00",
                "last_id": "qt00000004",
            }
        )

        assert await ids(store, ItemArgs(more=token)) == PUBLISHED_IDS[4:6]


class TestUnitDescendants:
    async def test_hidden_units_excluded(self, store: SqlAlchemyStore) -> None:
        page = await UnitDescendantsListing.plan(store, "root").page()

        assert [unit.id for unit in page.nodes] == ["jtest", "lbnl", "lbnl_rw"]
        assert page.total == 3

    async def test_type_filter(self, store: SqlAlchemyStore) -> None:
        page = await UnitDescendantsListing.plan(store, "root", type=UnitType.SERIES).page()

        assert [unit.id for unit in page.nodes] == ["lbnl_rw"]

    async def test_paging(self, store: SqlAlchemyStore) -> None:
        first = await UnitDescendantsListing.plan(store, "root", first=2).page()
        second = await UnitDescendantsListing.plan(store, "root", more=first.more).page()

        assert [u.id for u in first.nodes] == ["jtest", "lbnl"]
        assert [u.id for u in second.nodes] == ["lbnl_rw"]
        assert second.more is None

    async def test_more_with_type_rejected(self, store: SqlAlchemyStore) -> None:
        first = await UnitDescendantsListing.plan(store, "root", first=1).page()

        with pytest.raises(RequestError):
            UnitDescendantsListing.plan(store, "root", more=first.more, type=UnitType.SERIES)
