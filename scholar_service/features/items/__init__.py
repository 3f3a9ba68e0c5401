"""Items feature: repository models, typed attributes and listing planners."""

from scholar_service.features.items.listings import (
    AuthorListing,
    ContributorListing,
    UnitDescendantsListing,
)
from scholar_service.features.items.planner import (
    ItemArgs,
    ItemListing,
    ItemQuerySpec,
    ItemScope,
    plan_items,
)

__all__ = [
    "AuthorListing",
    "ContributorListing",
    "ItemArgs",
    "ItemListing",
    "ItemQuerySpec",
    "ItemScope",
    "UnitDescendantsListing",
    "plan_items",
]
