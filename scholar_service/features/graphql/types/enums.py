"""GraphQL enums, registered from the domain enums.

Wire names are the Python member names (``PUBLISHED``, ``ADDED_DESC``,
``NON_TEXTUAL``); resolvers receive and return the domain members.
"""

from __future__ import annotations

import strawberry

from scholar_service.features.items.models import AuthorIDScheme as ModelAuthorIDScheme
from scholar_service.features.items.models import FileVersion as ModelFileVersion
from scholar_service.features.items.models import ItemIDScheme as ModelItemIDScheme
from scholar_service.features.items.models import ItemOrder as ModelItemOrder
from scholar_service.features.items.models import ItemStatus as ModelItemStatus
from scholar_service.features.items.models import ItemType as ModelItemType
from scholar_service.features.items.models import Role as ModelRole
from scholar_service.features.items.models import UnitType as ModelUnitType

ItemStatus = strawberry.enum(
    ModelItemStatus, description="Publication status of an Item (usually PUBLISHED)"
)
ItemOrder = strawberry.enum(ModelItemOrder, description="Ordering for item list results")
ItemType = strawberry.enum(ModelItemType, description="Publication type of an Item (often ARTICLE)")
UnitType = strawberry.enum(ModelUnitType, description="Type of unit within the repository")
Role = strawberry.enum(ModelRole, description="Role of a non-author contributor")
FileVersion = strawberry.enum(ModelFileVersion, description="Version of a content file")
ItemIDScheme = strawberry.enum(
    ModelItemIDScheme, description="Scheme under which an item identifier was minted"
)
AuthorIDScheme = strawberry.enum(
    ModelAuthorIDScheme, description="Scheme under which an author identifier was minted"
)

__all__ = [
    "AuthorIDScheme",
    "FileVersion",
    "ItemIDScheme",
    "ItemOrder",
    "ItemStatus",
    "ItemType",
    "Role",
    "UnitType",
]
