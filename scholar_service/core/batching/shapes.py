"""Hashable descriptions of the base queries behind grouped loaders.

Loader instances are shared per (kind, parameters) within a request, so the
parameters must compare by value. SQLAlchemy ``Select`` objects do not, which
is why grouped loaders take a ``QueryShape`` and build the statement from it.

Usage:
    shape = (
        QueryShape(UnitItem)
        .where_eq("is_direct", True)
        .order("item_id", "ordering_of_units")
    )
    stmt = shape.to_select()
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import select

if TYPE_CHECKING:
    from collections.abc import Hashable

    from sqlalchemy import Select
    from sqlalchemy.sql.elements import ColumnElement

FilterOp = Literal["eq", "ne", "gt", "lt", "in", "not_in"]


@dataclass(frozen=True)
class ColumnFilter:
    """A single ``column <op> value`` restriction."""

    column: str
    op: FilterOp
    value: Hashable

    def to_clause(self, model: type) -> ColumnElement[bool]:
        col = getattr(model, self.column)
        if self.op == "eq":
            return col == self.value
        if self.op == "ne":
            return col != self.value
        if self.op == "gt":
            return col > self.value
        if self.op == "lt":
            return col < self.value
        if self.op == "in":
            return col.in_(self.value)
        return col.not_in(self.value)


@dataclass(frozen=True)
class OrderTerm:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class QueryShape:
    """Model plus restrictions and ordering, comparable by value."""

    model: type
    filters: tuple[ColumnFilter, ...] = field(default=())
    ordering: tuple[OrderTerm, ...] = field(default=())

    def __str__(self) -> str:
        parts = [self.model.__name__]
        parts.extend(f"{f.column} {f.op} {f.value!r}" for f in self.filters)
        if self.ordering:
            terms = ", ".join(f"{o.column}{' desc' if o.descending else ''}" for o in self.ordering)
            parts.append(f"order by {terms}")
        return " ".join(parts)

    def where(self, column: str, op: FilterOp, value: Any) -> QueryShape:
        if op in ("in", "not_in"):
            value = tuple(value)
        return replace(self, filters=(*self.filters, ColumnFilter(column, op, value)))

    def where_eq(self, column: str, value: Any) -> QueryShape:
        return self.where(column, "eq", value)

    def order(self, *columns: str, descending: bool = False) -> QueryShape:
        terms = tuple(OrderTerm(c, descending) for c in columns)
        return replace(self, ordering=(*self.ordering, *terms))

    def to_select(self) -> Select[Any]:
        """Build the ``SELECT`` for this shape (no key restriction)."""
        stmt = select(self.model)
        for flt in self.filters:
            stmt = stmt.where(flt.to_clause(self.model))
        for term in self.ordering:
            col = getattr(self.model, term.column)
            stmt = stmt.order_by(col.desc() if term.descending else col.asc())
        return stmt


__all__ = ["ColumnFilter", "OrderTerm", "QueryShape"]
