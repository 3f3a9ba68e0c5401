"""SQLAlchemy models for the repository's read schema.

The tables are owned by the ingestion pipeline; this service only reads
them. Free-form metadata lives in the ``attrs`` JSON column of each table
and is decoded once per record into the typed models of
``scholar_service.features.items.attributes``.
"""

from __future__ import annotations

import enum
from datetime import date, datetime
from functools import cached_property
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scholar_service.core.database import Base, JSONAttrs
from scholar_service.features.items.attributes import (
    AuthorAttributes,
    ItemAttributes,
    UnitAttributes,
)


class ItemStatus(str, enum.Enum):
    """Publication status; values are the stored (lowercase) form."""

    PUBLISHED = "published"
    EMBARGOED = "embargoed"
    WITHDRAWN = "withdrawn"
    EMPTY = "empty"
    PENDING = "pending"

    @classmethod
    def from_stored(cls, value: str) -> ItemStatus:
        # Withdrawn items flagged as junk are still reported as withdrawn
        if value == "withdrawn-junk":
            return cls.WITHDRAWN
        return cls(value)


class ItemOrder(str, enum.Enum):
    """Listing order: date field plus direction."""

    ADDED_ASC = "ADDED_ASC"
    ADDED_DESC = "ADDED_DESC"
    PUBLISHED_ASC = "PUBLISHED_ASC"
    PUBLISHED_DESC = "PUBLISHED_DESC"
    UPDATED_ASC = "UPDATED_ASC"
    UPDATED_DESC = "UPDATED_DESC"

    @property
    def field_name(self) -> str:
        return self.value.partition("_")[0].lower()

    @property
    def descending(self) -> bool:
        return self.value.endswith("_DESC")


class ItemType(str, enum.Enum):
    ARTICLE = "article"
    CHAPTER = "chapter"
    ETD = "etd"
    MONOGRAPH = "monograph"
    MULTIMEDIA = "multimedia"
    NON_TEXTUAL = "non-textual"

    @classmethod
    def from_genre(cls, genre: str) -> ItemType:
        if genre == "dissertation":
            return cls.ETD
        return cls(genre)


class UnitType(str, enum.Enum):
    CAMPUS = "campus"
    JOURNAL = "journal"
    MONOGRAPH_SERIES = "monograph_series"
    ORU = "oru"
    ROOT = "root"
    SEMINAR_SERIES = "seminar_series"
    SERIES = "series"


class Role(str, enum.Enum):
    """Role of a non-author contributor."""

    ADVISOR = "advisor"
    EDITOR = "editor"


class FileVersion(str, enum.Enum):
    AUTHOR_VERSION = "author_version"
    PUBLISHER_VERSION = "publisher_version"


class ItemIDScheme(str, enum.Enum):
    """Identifier schemes accepted when looking up an item."""

    ARK = "ARK"
    DOI = "DOI"
    LBNL_PUB_ID = "LBNL_PUB_ID"
    OA_PUB_ID = "OA_PUB_ID"
    OTHER_ID = "OTHER_ID"


class AuthorIDScheme(str, enum.Enum):
    """Identifier schemes accepted when looking up an author."""

    ARK = "ARK"
    ORCID = "ORCID"
    OTHER_ID = "OTHER_ID"


class Item(Base):
    """A publication (article, chapter, thesis, ...)."""

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, comment="e.g. 'qt0b03g6vz'")
    source: Mapped[str] = mapped_column(String(20), comment="Originating system, e.g. 'oa_harvester'")
    status: Mapped[str] = mapped_column(String(20), index=True)
    title: Mapped[str | None] = mapped_column(Text)
    content_type: Mapped[str | None] = mapped_column(String(255))
    genre: Mapped[str] = mapped_column(String(20))
    added: Mapped[date] = mapped_column(Date, index=True)
    published: Mapped[date] = mapped_column(Date, index=True)
    updated: Mapped[datetime] = mapped_column(DateTime, index=True)
    section: Mapped[int | None] = mapped_column(ForeignKey("sections.id"))
    rights: Mapped[str | None] = mapped_column(String(255))
    attrs: Mapped[dict[str, Any] | None] = mapped_column(JSONAttrs)

    @cached_property
    def attributes(self) -> ItemAttributes:
        return ItemAttributes.parse(self.attrs)

    def __repr__(self) -> str:
        return f"<Item(id={self.id!r}, status={self.status!r})>"


class Person(Base):
    """An author with a repository-minted identifier."""

    __tablename__ = "people"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    attrs: Mapped[dict[str, Any] | None] = mapped_column(JSONAttrs)

    @cached_property
    def attributes(self) -> AuthorAttributes:
        return AuthorAttributes.parse(self.attrs)


class ItemAuthor(Base):
    """One author of one item, in author order."""

    __tablename__ = "item_authors"

    item_id: Mapped[str] = mapped_column(ForeignKey("items.id"), primary_key=True)
    ordering: Mapped[int] = mapped_column(Integer, primary_key=True)
    person_id: Mapped[str | None] = mapped_column(ForeignKey("people.id"), index=True)
    attrs: Mapped[dict[str, Any] | None] = mapped_column(JSONAttrs)

    @cached_property
    def attributes(self) -> AuthorAttributes:
        return AuthorAttributes.parse(self.attrs)

    def __repr__(self) -> str:
        return f"<ItemAuthor(item_id={self.item_id!r}, ordering={self.ordering})>"


class ItemContrib(Base):
    """An editor or advisor of one item."""

    __tablename__ = "item_contribs"

    item_id: Mapped[str] = mapped_column(ForeignKey("items.id"), primary_key=True)
    ordering: Mapped[int] = mapped_column(Integer, primary_key=True)
    role: Mapped[str] = mapped_column(String(20))
    attrs: Mapped[dict[str, Any] | None] = mapped_column(JSONAttrs)

    @cached_property
    def attributes(self) -> AuthorAttributes:
        return AuthorAttributes.parse(self.attrs)


class Unit(Base):
    """A campus, department, series, journal or the root of the hierarchy."""

    __tablename__ = "units"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(32))
    status: Mapped[str] = mapped_column(String(32))
    attrs: Mapped[dict[str, Any] | None] = mapped_column(JSONAttrs)

    @cached_property
    def attributes(self) -> UnitAttributes:
        return UnitAttributes.parse(self.attrs)

    @property
    def is_hidden(self) -> bool:
        return self.status == "hidden"

    def __repr__(self) -> str:
        return f"<Unit(id={self.id!r})>"


class UnitHier(Base):
    """Ancestor relation between units, direct or transitive."""

    __tablename__ = "unit_hier"

    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), primary_key=True)
    ancestor_unit: Mapped[str] = mapped_column(ForeignKey("units.id"), primary_key=True)
    ordering: Mapped[int | None] = mapped_column(Integer)
    is_direct: Mapped[bool] = mapped_column(Boolean, default=False)


class UnitItem(Base):
    """Membership of an item in a unit."""

    __tablename__ = "unit_items"

    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), primary_key=True)
    item_id: Mapped[str] = mapped_column(ForeignKey("items.id"), primary_key=True)
    ordering_of_units: Mapped[int] = mapped_column(Integer, default=0)
    is_direct: Mapped[bool] = mapped_column(Boolean, default=True)


class Issue(Base):
    """One issue of a journal unit."""

    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), index=True)
    volume: Mapped[str | None] = mapped_column(String(32))
    issue: Mapped[str | None] = mapped_column(String(32))
    published: Mapped[date | None] = mapped_column(Date)
    attrs: Mapped[dict[str, Any] | None] = mapped_column(JSONAttrs)


class Section(Base):
    """A section (e.g. "Articles") within a journal issue."""

    __tablename__ = "sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    ordering: Mapped[int | None] = mapped_column(Integer)


__all__ = [
    "AuthorIDScheme",
    "FileVersion",
    "Issue",
    "Item",
    "ItemAuthor",
    "ItemContrib",
    "ItemIDScheme",
    "ItemOrder",
    "ItemStatus",
    "ItemType",
    "Person",
    "Role",
    "Section",
    "Unit",
    "UnitHier",
    "UnitItem",
    "UnitType",
]
