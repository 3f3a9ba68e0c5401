"""Cursor-based (keyset) pagination.

Listings are:
- Stable: results don't shift when rows share an ordering value
- Performant: indexed seeks instead of OFFSET scans
- Stateless: the cursor carries the complete listing arguments

Usage:
    listing = plan_items(args)
    page = await listing.page()     # Page(total=..., nodes=[...], more="eyJx...")
    next_listing = plan_items(ItemArgs(more=page.more))
"""

from scholar_service.core.pagination.cursor import CursorCodec
from scholar_service.core.pagination.keyset import (
    KeysetFilter,
    KeysetListing,
    boundary_value,
    convert_boundary,
)
from scholar_service.core.pagination.schemas import Page

__all__ = [
    "CursorCodec",
    "KeysetFilter",
    "KeysetListing",
    "Page",
    "boundary_value",
    "convert_boundary",
]
