"""Tests for item listing arguments and tag predicates."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy.dialects import sqlite

from scholar_service.core.exceptions import InvalidCursorError, RequestError
from scholar_service.core.settings import PaginationSettings
from scholar_service.features.items.models import ItemOrder, ItemStatus
from scholar_service.features.items.planner import (
    ItemArgs,
    ItemQuerySpec,
    ItemScope,
    build_spec,
    item_cursor_codec,
    plan_items,
    validate_first,
)
from scholar_service.features.items.predicates import compile_tag, genre_values

TAG_ERROR = (
    "tags must start with 'discipline:', 'keyword:', 'subject:', 'grant:', 'type:', or 'source:'"
)


@pytest.fixture
def pagination() -> PaginationSettings:
    return PaginationSettings()


class TestValidateFirst:
    @pytest.mark.parametrize("first", [1, 100, 500])
    def test_accepts_in_range(self, first: int) -> None:
        assert validate_first(first) == first

    @pytest.mark.parametrize("first", [0, -1, 501])
    def test_rejects_out_of_range(self, first: int) -> None:
        with pytest.raises(RequestError, match=r"'first' must be in range 1\.\.500"):
            validate_first(first)


class TestBuildSpec:
    """Defaults applied to fresh listing arguments."""

    def test_defaults(self, pagination: PaginationSettings) -> None:
        spec = build_spec(ItemArgs(), pagination)

        assert spec.include == (ItemStatus.PUBLISHED,)
        assert spec.order is ItemOrder.ADDED_DESC
        assert spec.tags == ()
        assert spec.first == pagination.default_first
        assert not spec.resuming

    def test_aware_bounds_become_naive_utc(self, pagination: PaginationSettings) -> None:
        after = datetime(2020, 1, 1, 8, 0, tzinfo=UTC)

        spec = build_spec(ItemArgs(after=after), pagination)

        assert spec.after == datetime(2020, 1, 1, 8, 0)

    def test_first_checked_against_settings(self) -> None:
        with pytest.raises(RequestError):
            build_spec(ItemArgs(first=501), PaginationSettings())


class TestPlanItems:
    """Planning without touching the store."""

    def test_more_with_other_arguments_rejected(self, pagination: PaginationSettings) -> None:
        token = item_cursor_codec().encode(ItemQuerySpec(first=2))

        with pytest.raises(RequestError, match="Do not specify other arguments") as exc:
            plan_items(None, ItemArgs(more=token, first=2), pagination=pagination)

        assert exc.value.extra == {"arguments": ["first"]}

    def test_more_restores_arguments(self, pagination: PaginationSettings) -> None:
        spec = ItemQuerySpec(first=2, tags=("source:ojs",), last_value="2020-01-01", last_id="qt1")
        token = item_cursor_codec(pagination.cursor_version).encode(spec)

        listing = plan_items(None, ItemArgs(more=token), pagination=pagination)

        assert listing.spec == spec
        assert listing.resumed

    def test_bad_cursor_rejected(self, pagination: PaginationSettings) -> None:
        with pytest.raises(InvalidCursorError):
            plan_items(None, ItemArgs(more="garbage"), pagination=pagination)

    def test_unknown_tag_prefix_rejected(self, pagination: PaginationSettings) -> None:
        with pytest.raises(RequestError) as exc:
            plan_items(None, ItemArgs(tags=["colour:blue"]), pagination=pagination)

        assert exc.value.detail == TAG_ERROR

    def test_fresh_listing_is_not_resumed(self, pagination: PaginationSettings) -> None:
        listing = plan_items(None, ItemArgs(first=3), pagination=pagination)

        assert listing.first == 3
        assert not listing.resumed


class TestItemScope:
    def test_rejects_unsafe_author_key(self) -> None:
        with pytest.raises(RequestError, match="valid subScheme required"):
            ItemScope(author_key="x') or 1=1 --", author_id="y")

    def test_accepts_identifier_key(self) -> None:
        assert ItemScope(author_key="lbnl_id", author_id="L77").author_key == "lbnl_id"


class TestTags:
    @pytest.mark.parametrize("tag", ["keyword", "nope:x", ":x", "Keyword:food"])
    def test_invalid_prefixes(self, tag: str) -> None:
        with pytest.raises(RequestError) as exc:
            compile_tag(tag)

        assert exc.value.detail == TAG_ERROR

    def test_value_may_contain_colons(self) -> None:
        clause = compile_tag("source:oai:lbnl")
        compiled = clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True})

        assert "'oai:lbnl'" in str(compiled)

    def test_discipline_compiles_for_sqlite(self) -> None:
        compiled = str(compile_tag("discipline:Law").compile(dialect=sqlite.dialect()))

        assert "json_each" in compiled
        assert "$.disciplines" in compiled

    @pytest.mark.parametrize(
        ("name", "genres"),
        [
            ("ETD", ["etd", "dissertation"]),
            ("ARTICLE", ["article"]),
            ("NON_TEXTUAL", ["non-textual"]),
        ],
    )
    def test_genre_values(self, name: str, genres: list[str]) -> None:
        assert genre_values(name) == genres

