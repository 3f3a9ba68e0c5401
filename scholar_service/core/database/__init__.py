"""Database primitives: declarative base and statement filters."""

from scholar_service.core.database.base import NAMING_CONVENTION, Base, JSONAttrs
from scholar_service.core.database.filters import InSubquery, StatementFilter

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "InSubquery",
    "JSONAttrs",
    "StatementFilter",
]
