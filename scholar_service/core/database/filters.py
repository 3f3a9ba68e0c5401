"""Query filtering utilities for SQLAlchemy.

These filters work directly with SQLAlchemy statements without hiding the
query. They're utility helpers, not an abstraction layer.

Usage:
    from sqlalchemy import select
    from scholar_service.core.database.filters import InSubquery

    stmt = select(Item)
    stmt = InSubquery(Item.id, UnitItem.item_id, UnitItem.unit_id == "lbnl").apply(stmt)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, select

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.elements import ColumnElement


class StatementFilter(ABC):
    """Base class for statement filters.

    All filters implement `apply()` which modifies a SQLAlchemy statement.
    """

    @abstractmethod
    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply filter to statement.

        Args:
            statement: SQLAlchemy select statement

        Returns:
            Modified select statement
        """
        ...


class InSubquery(StatementFilter):
    """Restrict a column to the values selected from a related table.

    Produces ``column IN (SELECT source FROM ... WHERE condition)``.

    Example:
        # Items written by a given person
        InSubquery(
            Item.id,
            ItemAuthor.item_id,
            ItemAuthor.person_id == "ark:/99166/p3abc",
        ).apply(stmt)
    """

    def __init__(
        self,
        column: InstrumentedAttribute[Any],
        source: InstrumentedAttribute[Any],
        condition: ColumnElement[bool],
    ) -> None:
        self.column = column
        self.source = source
        self.condition = condition

    def apply(self, statement: Select[Any]) -> Select[Any]:
        subquery = select(self.source).where(self.condition)
        return statement.where(self.column.in_(subquery))


__all__ = ["InSubquery", "StatementFilter"]
