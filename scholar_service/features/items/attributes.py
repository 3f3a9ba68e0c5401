"""Typed views of the ``attrs`` JSON column.

Each record's JSON blob is validated once into a frozen pydantic model. Keys
missing from the blob become ``None`` (or an empty tuple for lists), exactly
as absent keys behave when read from the raw mapping. Unknown keys are
ignored, except on author attributes where extra ``*_id`` keys carry
identifiers from other systems.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

A = TypeVar("A", bound="Attributes")


class Attributes(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def parse(cls: type[A], raw: dict[str, Any] | str | None) -> A:
        """Decode a raw ``attrs`` value (mapping, JSON text or NULL)."""
        if raw is None or raw == "":
            return cls()
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.warning(
                    "Ignoring malformed %s JSON", cls.__name__, extra={"length": len(raw)}
                )
                return cls()
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError:
            # Keep the fields that are well formed rather than losing the record
            return cls.model_validate(
                {k: v for k, v in raw.items() if _field_ok(cls, k, v)}
            )


def _field_ok(model: type[BaseModel], key: str, value: Any) -> bool:
    try:
        model.model_validate({key: value})
    except ValidationError:
        return False
    return True


class ExternalJournal(Attributes):
    name: str | None = None
    volume: str | None = None
    issue: str | None = None
    issn: str | None = None
    fpage: str | None = None
    lpage: str | None = None


class Grant(Attributes):
    name: str


class LocalId(Attributes):
    type: str
    id: str


class SuppFile(Attributes):
    file: str
    mime_type: str | None = Field(default=None, alias="mimeType")
    size: int | None = None


class NativeFile(Attributes):
    name: str | None = None
    size: str | None = None


class ItemAttributes(Attributes):
    """Metadata of an item."""

    abstract: str | None = None
    content_length: int | None = None
    content_version: str | None = None
    disciplines: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    subjects: tuple[str, ...] = ()
    grants: tuple[Grant, ...] = ()
    ext_journal: ExternalJournal | None = None
    publisher: str | None = None
    proceedings: str | None = None
    isbn: str | None = None
    language: str | None = None
    embargo_date: str | None = None
    supp_files: tuple[SuppFile, ...] = ()
    uc_pms_pub_type: str | None = None
    local_ids: tuple[LocalId, ...] = ()
    doi: str | None = None
    pub_web_loc: tuple[str, ...] = ()
    book_title: str | None = None
    native_file: NativeFile | None = None
    is_peer_reviewed: bool | None = None

    def journal_field(self, name: str) -> str | None:
        if self.ext_journal is None:
            return None
        return getattr(self.ext_journal, name)

    @property
    def pagination(self) -> str | None:
        fpage = self.journal_field("fpage")
        lpage = self.journal_field("lpage")
        if fpage and lpage:
            return f"{fpage}-{lpage}"
        return fpage or lpage

    def all_local_ids(self) -> list[LocalId]:
        """Local identifiers, with the DOI (if any) first."""
        ids = list(self.local_ids)
        if self.doi:
            ids.insert(0, LocalId(type="doi", id=self.doi))
        return ids


class AuthorAttributes(Attributes):
    """Name parts and identifiers of an author or contributor."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    name: str | None = None
    fname: str | None = None
    lname: str | None = None
    mname: str | None = None
    suffix: str | None = None
    institution: str | None = None
    organization: str | None = None
    email: str | None = None
    orcid: str | None = Field(default=None, alias="ORCID_id")

    def identifiers(self) -> dict[str, str]:
        """All ``<scheme>_id`` keys, e.g. ``{"ORCID_id": "0000-..."}``, sorted by key."""
        found = dict(self.model_extra or {})
        if self.orcid:
            found["ORCID_id"] = self.orcid
        return {
            key: str(value)
            for key, value in sorted(found.items())
            if key.endswith("_id") and value is not None
        }

    def name_variant(self) -> dict[str, Any]:
        """Name parts without contact details, for comparing variants."""
        return self.model_dump(by_alias=True, exclude={"email"}, exclude_none=True)


class UnitAttributes(Attributes):
    issn: str | None = None


__all__ = [
    "AuthorAttributes",
    "ExternalJournal",
    "Grant",
    "ItemAttributes",
    "LocalId",
    "NativeFile",
    "SuppFile",
    "UnitAttributes",
]
