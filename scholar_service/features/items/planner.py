"""Item query planner.

Turns the arguments of an ``items`` listing into a filtered, ordered and
resumable query:

1. Status filter (``include``, published only by default)
2. Scope (items of a unit, of a person, of an author identifier, or one item)
3. ``before`` / ``after`` range on the ordering field
4. Tag predicates
5. ``total`` counts this base query; the page query adds ordering by
   (field, id) and, when resuming, the keyset boundary

A continuation call passes only ``more``: the cursor carries every other
argument plus the boundary, so pages keep their filters and order.

Usage:
    listing = plan_items(store, ItemArgs(first=25, tags=["keyword:food"]))
    page = await listing.page()
    next_page = await plan_items(store, ItemArgs(more=page.more)).page()
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, fields
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from sqlalchemy import Date, select

from scholar_service.core.database.filters import InSubquery
from scholar_service.core.exceptions import RequestError
from scholar_service.core.pagination import (
    CursorCodec,
    KeysetFilter,
    KeysetListing,
    boundary_value,
    convert_boundary,
)
from scholar_service.core.settings import PaginationSettings, get_pagination_settings
from scholar_service.features.items.models import Item, ItemAuthor, ItemOrder, ItemStatus, UnitItem
from scholar_service.features.items.predicates import compile_tag

if TYPE_CHECKING:
    from sqlalchemy import Select

    from scholar_service.core.batching.store import SqlAlchemyStore

_ATTR_KEY = re.compile(r"^\w+$")


def validate_first(first: int, max_first: int = 500) -> int:
    """Check a requested page size.

    Raises:
        RequestError: If ``first`` is outside ``1..max_first``.
    """
    if not 1 <= first <= max_first:
        raise RequestError(
            f"'first' must be in range 1..{max_first}",
            type="invalid-argument",
            extra={"argument": "first", "value": first},
        )
    return first


@dataclass(frozen=True)
class ItemArgs:
    """Arguments of an ``items`` listing as supplied by the caller.

    ``None`` means "not supplied"; defaults are applied by the planner.
    """

    first: int | None = None
    more: str | None = None
    before: datetime | None = None
    after: datetime | None = None
    include: Sequence[ItemStatus] | None = None
    tags: Sequence[str] | None = None
    order: ItemOrder | None = None

    def supplied(self) -> list[str]:
        """Names of the filter arguments given explicitly."""
        return [f.name for f in fields(self) if f.name != "more" and getattr(self, f.name) is not None]


class ItemQuerySpec(BaseModel):
    """Complete, self-contained description of one page of items.

    Attributes:
        include: Statuses to list
        tags: Tag filters, all of which must match
        order: Ordering field and direction
        first: Page size
        before: Exclusive upper bound on the ordering field
        after: Inclusive lower bound on the ordering field
        last_value: Ordering value of the last row of the previous page (ISO)
        last_id: Id of the last row of the previous page
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    include: tuple[ItemStatus, ...] = (ItemStatus.PUBLISHED,)
    tags: tuple[str, ...] = ()
    order: ItemOrder = ItemOrder.ADDED_DESC
    first: int = Field(default=100, ge=1, le=500)
    before: datetime | None = None
    after: datetime | None = None
    last_value: str | None = None
    last_id: str | None = None

    @field_validator("before", "after")
    @classmethod
    def _naive_utc(cls, value: datetime | None) -> datetime | None:
        # Stored timestamps are naive UTC
        if value is not None and value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _check_boundary(self) -> ItemQuerySpec:
        """Reject a resume boundary that cannot seek on the ordering column."""
        if (self.last_value is None) != (self.last_id is None):
            raise ValueError("last_value and last_id must be given together")
        if self.last_value is not None:
            # Raises ValueError for text that is not a value of the column's type
            convert_boundary(getattr(Item, self.order.field_name), self.last_value)
        return self

    @property
    def resuming(self) -> bool:
        return self.last_id is not None


@dataclass(frozen=True)
class ItemScope:
    """Restriction of a listing to the items reachable from a parent object.

    Attributes:
        unit_id: Items in this unit (directly or through a sub-unit)
        person_id: Items by this person
        author_key: ``item_authors.attrs`` key holding ``author_id``,
            e.g. ``"ORCID_id"``
        author_id: Identifier value matched under ``author_key``
        item_id: Just this item (an author with no person record)
    """

    unit_id: str | None = None
    person_id: str | None = None
    author_key: str | None = None
    author_id: str | None = None
    item_id: str | None = None

    def __post_init__(self) -> None:
        if self.author_key is not None and not _ATTR_KEY.match(self.author_key):
            raise RequestError(
                "valid subScheme required with 'OTHER' scheme",
                extra={"subScheme": self.author_key},
            )

    def apply(self, statement: Select[Any]) -> Select[Any]:
        if self.unit_id is not None:
            statement = InSubquery(Item.id, UnitItem.item_id, UnitItem.unit_id == self.unit_id).apply(
                statement
            )
        if self.person_id is not None:
            statement = InSubquery(
                Item.id, ItemAuthor.item_id, ItemAuthor.person_id == self.person_id
            ).apply(statement)
        if self.author_key is not None and self.author_id is not None:
            statement = InSubquery(
                Item.id,
                ItemAuthor.item_id,
                ItemAuthor.attrs[self.author_key].as_string() == self.author_id,
            ).apply(statement)
        if self.item_id is not None:
            statement = statement.where(Item.id == self.item_id)
        return statement


def item_cursor_codec(version: int = 1) -> CursorCodec[ItemQuerySpec]:
    return CursorCodec(ItemQuerySpec, version=version)


class ItemListing(KeysetListing[Item]):
    """One page of items for a planned query."""

    listing = "items"

    def __init__(
        self,
        store: SqlAlchemyStore,
        spec: ItemQuerySpec,
        scope: ItemScope,
        codec: CursorCodec[ItemQuerySpec],
    ) -> None:
        self.spec = spec
        self.scope = scope
        self.codec = codec
        self.field = getattr(Item, spec.order.field_name)

        base = select(Item).where(Item.status.in_([status.value for status in spec.include]))
        base = scope.apply(base)
        base = self._apply_range(base)
        for tag in spec.tags:
            base = base.where(compile_tag(tag))

        keyset = KeysetFilter(
            self.field,
            Item.id,
            descending=spec.order.descending,
            last_value=spec.last_value,
            last_id=spec.last_id,
        )
        super().__init__(store, base, keyset.apply(base), spec.first, resumed=keyset.resuming)

    def _apply_range(self, statement: Select[Any]) -> Select[Any]:
        # Date columns compare against the date part of the bound
        as_date = isinstance(self.field.type, Date)
        if self.spec.before is not None:
            bound = self.spec.before.date() if as_date else self.spec.before
            statement = statement.where(self.field < bound)
        if self.spec.after is not None:
            bound = self.spec.after.date() if as_date else self.spec.after
            statement = statement.where(self.field >= bound)
        return statement

    def cursor_after(self, row: Item) -> str:
        boundary = {
            "last_value": boundary_value(getattr(row, self.spec.order.field_name)),
            "last_id": row.id,
        }
        return self.codec.encode(self.spec.model_copy(update=boundary))


def build_spec(args: ItemArgs, pagination: PaginationSettings) -> ItemQuerySpec:
    """Apply defaults to freshly supplied arguments."""
    first = validate_first(
        pagination.default_first if args.first is None else args.first,
        pagination.max_first,
    )
    values: dict[str, Any] = {"first": first}
    if args.include is not None:
        values["include"] = tuple(args.include)
    if args.tags is not None:
        values["tags"] = tuple(args.tags)
    if args.order is not None:
        values["order"] = args.order
    if args.before is not None:
        values["before"] = args.before
    if args.after is not None:
        values["after"] = args.after
    try:
        return ItemQuerySpec.model_validate(values)
    except ValidationError as exc:
        raise RequestError(f"Invalid items arguments: {exc.errors()[0]['msg']}") from exc


def plan_items(
    store: SqlAlchemyStore,
    args: ItemArgs,
    scope: ItemScope | None = None,
    *,
    pagination: PaginationSettings | None = None,
) -> ItemListing:
    """Plan an items listing.

    Args:
        store: Store used to run the count and page queries
        args: Caller arguments, or just ``more`` to continue a listing
        scope: Parent restriction; not part of the cursor, the parent object
            supplies it again on continuation
        pagination: Page size limits and cursor version

    Returns:
        A lazy listing; nothing is queried until ``total``/``nodes``/``more``

    Raises:
        RequestError: For a cursor combined with other arguments, an
            out-of-range ``first`` or an unknown tag prefix
        InvalidCursorError: If ``more`` cannot be decoded
    """
    pagination = pagination or get_pagination_settings()
    codec = item_cursor_codec(pagination.cursor_version)
    if args.more is not None:
        supplied = args.supplied()
        if supplied:
            raise RequestError(
                "Do not specify other arguments with 'more'; it already encodes them",
                extra={"arguments": supplied},
            )
        spec = codec.decode(args.more)
        validate_first(spec.first, pagination.max_first)
    else:
        spec = build_spec(args, pagination)
    return ItemListing(store, spec, scope or ItemScope(), codec)


__all__ = [
    "ItemArgs",
    "ItemListing",
    "ItemQuerySpec",
    "ItemScope",
    "build_spec",
    "item_cursor_codec",
    "plan_items",
    "validate_first",
]
