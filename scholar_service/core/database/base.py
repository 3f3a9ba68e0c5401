"""Declarative base for the read models.

The service never creates or migrates the production schema; the models map
existing tables. ``Base.metadata.create_all`` is used by the test suite to
build a throwaway SQLite database.
"""

from __future__ import annotations

from sqlalchemy import JSON, MetaData
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, declared_attr

# Consistent naming convention for database constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# JSON attribute column: JSONB on PostgreSQL, JSON elsewhere
JSONAttrs = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base with automatic table naming.

    Table names default to the lowercased class name; models whose table is
    named differently set ``__tablename__`` explicitly.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()


__all__ = ["NAMING_CONVENTION", "Base", "JSONAttrs"]
