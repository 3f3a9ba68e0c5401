"""Paged sub-listings hanging off a parent object.

Authors and contributors of an item are loaded through the request's batch
loaders, so the author lists of every item on a page cost one grouped query
and one grouped count, whatever the number of items. Their ``total``,
``nodes`` and ``more`` are ``Deferred`` values resolved by the scheduler.

Descendants of a unit are a plain keyset listing over ``unit_hier``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select

from scholar_service.core.batching import ABSENT, QueryShape
from scholar_service.core.exceptions import RequestError
from scholar_service.core.pagination import CursorCodec, KeysetListing
from scholar_service.core.settings import PaginationSettings, get_pagination_settings
from scholar_service.features.items.models import ItemAuthor, ItemContrib, Unit, UnitHier, UnitType
from scholar_service.features.items.planner import validate_first

if TYPE_CHECKING:
    from sqlalchemy import Select

    from scholar_service.core.batching import Deferred, RequestLoaders
    from scholar_service.core.batching.store import SqlAlchemyStore


def _reject_mixed(more: str | None, **supplied: Any) -> None:
    given = [name for name, value in supplied.items() if value is not None]
    if more is not None and given:
        raise RequestError(
            "Do not specify other arguments with 'more'; it already encodes them",
            extra={"arguments": given},
        )


class PeopleSpec(BaseModel):
    """Arguments of an authors or contributors page."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    first: int = Field(default=100, ge=1, le=500)
    last_ord: int | None = None


class ItemPeopleListing:
    """Authors (or contributors) of one item, one page at a time.

    Usage:
        listing = AuthorListing.plan(loaders, "qt12345678", first=2)
        names = listing.nodes().then_present(lambda rows: [r.attributes.name for r in rows])
        await scheduler.resolve(names)
    """

    model: ClassVar[type]

    def __init__(
        self,
        loaders: RequestLoaders,
        item_id: str,
        spec: PeopleSpec,
        codec: CursorCodec[PeopleSpec],
    ) -> None:
        self.loaders = loaders
        self.item_id = item_id
        self.spec = spec
        self.codec = codec

    @classmethod
    def plan(
        cls,
        loaders: RequestLoaders,
        item_id: str,
        *,
        first: int | None = None,
        more: str | None = None,
        pagination: PaginationSettings | None = None,
    ) -> ItemPeopleListing:
        pagination = pagination or get_pagination_settings()
        codec = CursorCodec(PeopleSpec, version=pagination.cursor_version)
        _reject_mixed(more, first=first)
        if more is not None:
            spec = codec.decode(more)
        else:
            spec = PeopleSpec(
                first=validate_first(
                    pagination.default_first if first is None else first, pagination.max_first
                )
            )
        validate_first(spec.first, pagination.max_first)
        return cls(loaders, item_id, spec, codec)

    def total(self) -> Deferred[int]:
        shape = QueryShape(self.model)
        return self.loaders.load_count(shape, "item_id", self.item_id).then(
            lambda count: 0 if count is ABSENT else count
        )

    def nodes(self) -> Deferred[Any]:
        """Rows of this page, or ``ABSENT`` when the item has none past the boundary."""
        shape = QueryShape(self.model).order("item_id", "ordering")
        if self.spec.last_ord is not None:
            shape = shape.where("ordering", "gt", self.spec.last_ord)
        return self.loaders.load_group(shape, "item_id", self.item_id, self.spec.first)

    def more(self) -> Deferred[str | None]:
        def _cursor(rows: Any) -> str | None:
            if rows is ABSENT or len(rows) != self.spec.first:
                return None
            return self.codec.encode(self.spec.model_copy(update={"last_ord": rows[-1].ordering}))

        return self.nodes().then(_cursor)


class AuthorListing(ItemPeopleListing):
    model = ItemAuthor


class ContributorListing(ItemPeopleListing):
    model = ItemContrib


class UnitsSpec(BaseModel):
    """Arguments of a unit descendants page."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    first: int = Field(default=100, ge=1, le=500)
    type: UnitType | None = None
    last_id: str | None = None


class UnitDescendantsListing(KeysetListing[Unit]):
    """Visible units below an ancestor, in unit id order."""

    listing = "unit_descendants"

    def __init__(
        self,
        store: SqlAlchemyStore,
        ancestor_id: str,
        spec: UnitsSpec,
        codec: CursorCodec[UnitsSpec],
    ) -> None:
        self.ancestor_id = ancestor_id
        self.spec = spec
        self.codec = codec

        base: Select[Any] = (
            select(Unit)
            .join(UnitHier, UnitHier.unit_id == Unit.id)
            .where(Unit.status != "hidden", UnitHier.ancestor_unit == ancestor_id)
        )
        if spec.type is not None:
            base = base.where(Unit.type == spec.type.value)
        page = base.order_by(UnitHier.unit_id)
        if spec.last_id is not None:
            page = page.where(UnitHier.unit_id > spec.last_id)
        super().__init__(store, base, page, spec.first, resumed=spec.last_id is not None)

    @classmethod
    def plan(
        cls,
        store: SqlAlchemyStore,
        ancestor_id: str,
        *,
        first: int | None = None,
        more: str | None = None,
        type: UnitType | None = None,
        pagination: PaginationSettings | None = None,
    ) -> UnitDescendantsListing:
        pagination = pagination or get_pagination_settings()
        codec = CursorCodec(UnitsSpec, version=pagination.cursor_version)
        _reject_mixed(more, first=first, type=type)
        if more is not None:
            spec = codec.decode(more)
        else:
            spec = UnitsSpec(
                first=validate_first(
                    pagination.default_first if first is None else first, pagination.max_first
                ),
                type=type,
            )
        validate_first(spec.first, pagination.max_first)
        return cls(store, ancestor_id, spec, codec)

    def cursor_after(self, row: Unit) -> str:
        return self.codec.encode(self.spec.model_copy(update={"last_id": row.id}))


__all__ = [
    "AuthorListing",
    "ContributorListing",
    "ItemPeopleListing",
    "PeopleSpec",
    "UnitDescendantsListing",
    "UnitsSpec",
]
