"""Relationship lookups built on the request's batch loaders.

Each helper returns a ``Deferred`` so that resolvers for many parent objects
share one batched query per relationship:

- journal chain: item section -> issue -> unit
- units of an item, children and parents of a unit
- issues of a journal unit
- every author row recorded for a person
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from scholar_service.core.batching import ABSENT, Deferred, QueryShape
from scholar_service.features.items.models import Issue, ItemAuthor, Section, Unit, UnitHier, UnitItem

if TYPE_CHECKING:
    from collections.abc import Iterable

    from scholar_service.core.batching import RequestLoaders

# Direct unit memberships of items, in the item's own unit order
UNIT_ITEMS = QueryShape(UnitItem).where_eq("is_direct", True).order("item_id", "ordering_of_units")

# Direct parent/child links, grouped by either end
DIRECT_HIERARCHY = QueryShape(UnitHier).where_eq("is_direct", True).order("ordering")

ISSUES = QueryShape(Issue).order("published", "volume", "issue")

AUTHOR_ROWS = QueryShape(ItemAuthor).order("item_id", "ordering")


def load_visible_units(
    loaders: RequestLoaders,
    unit_ids: Iterable[str] | Any,
    empty: Any = ABSENT,
) -> Deferred[Any]:
    """Load units by id, dropping hidden and missing ones.

    Args:
        loaders: The request's loaders
        unit_ids: Ids to load, or ``ABSENT`` when the relationship has no rows
        empty: Result when every unit was filtered out

    Returns:
        Deferred list of units in the requested order, ``empty``, or ``ABSENT``
    """
    if unit_ids is ABSENT:
        return Deferred.resolved(ABSENT)

    def _visible(units: list[Any]) -> Any:
        shown = [unit for unit in units if unit is not ABSENT and not unit.is_hidden]
        return shown or empty

    return loaders.load_many(Unit, list(unit_ids)).then(_visible)


def load_journal_issue(loaders: RequestLoaders, section_id: int) -> Deferred[Any]:
    """Issue containing a journal section."""
    return loaders.load_one(Section, section_id).then_present(
        lambda section: loaders.load_one(Issue, section.issue_id)
    )


def load_journal_unit(loaders: RequestLoaders, section_id: int) -> Deferred[Any]:
    """Journal unit publishing a section."""
    return load_journal_issue(loaders, section_id).then_present(
        lambda issue: loaders.load_one(Unit, issue.unit_id)
    )


def load_item_units(loaders: RequestLoaders, item_id: str) -> Deferred[Any]:
    """Visible units an item belongs to directly; ``[]`` if all are hidden."""
    return loaders.load_group(UNIT_ITEMS, "item_id", item_id).then(
        lambda rows: load_visible_units(
            loaders, rows if rows is ABSENT else [row.unit_id for row in rows], empty=[]
        )
    )


def load_unit_children(loaders: RequestLoaders, unit_id: str) -> Deferred[Any]:
    return loaders.load_group(DIRECT_HIERARCHY, "ancestor_unit", unit_id).then(
        lambda rows: load_visible_units(
            loaders, rows if rows is ABSENT else [row.unit_id for row in rows]
        )
    )


def load_unit_parents(loaders: RequestLoaders, unit_id: str) -> Deferred[Any]:
    return loaders.load_group(DIRECT_HIERARCHY, "unit_id", unit_id).then(
        lambda rows: load_visible_units(
            loaders, rows if rows is ABSENT else [row.ancestor_unit for row in rows]
        )
    )


def load_unit_issues(loaders: RequestLoaders, unit_id: str) -> Deferred[Any]:
    return loaders.load_group(ISSUES, "unit_id", unit_id)


def load_person_authorships(loaders: RequestLoaders, person_id: str) -> Deferred[Any]:
    """Every ``item_authors`` row attributed to a person."""
    return loaders.load_group(AUTHOR_ROWS, "person_id", person_id)


__all__ = [
    "AUTHOR_ROWS",
    "DIRECT_HIERARCHY",
    "ISSUES",
    "UNIT_ITEMS",
    "load_item_units",
    "load_journal_issue",
    "load_journal_unit",
    "load_person_authorships",
    "load_unit_children",
    "load_unit_issues",
    "load_unit_parents",
    "load_visible_units",
]
