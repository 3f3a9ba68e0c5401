"""GraphQL type definitions.

This package contains Strawberry types for:
- Enums registered from the domain models
- Items and their supplemental values (LocalID, SuppFile)
- Authors and contributors
- Units and journal issues
"""

from __future__ import annotations

from scholar_service.features.graphql.types.enums import (
    AuthorIDScheme,
    FileVersion,
    ItemIDScheme,
    ItemOrder,
    ItemStatus,
    ItemType,
    Role,
    UnitType,
)
from scholar_service.features.graphql.types.items import Item, Items, LocalID, SuppFile
from scholar_service.features.graphql.types.people import (
    Author,
    AuthorID,
    Authors,
    Contributor,
    Contributors,
    NameParts,
)
from scholar_service.features.graphql.types.units import Issue, Unit, Units

__all__ = [
    # Enums
    "AuthorIDScheme",
    "FileVersion",
    "ItemIDScheme",
    "ItemOrder",
    "ItemStatus",
    "ItemType",
    "Role",
    "UnitType",
    # Item types
    "Item",
    "Items",
    "LocalID",
    "SuppFile",
    # People types
    "Author",
    "AuthorID",
    "Authors",
    "Contributor",
    "Contributors",
    "NameParts",
    # Unit types
    "Issue",
    "Unit",
    "Units",
]
