"""Page result returned by cursor-paginated listings."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing.

    Attributes:
        total: Rows matching the filters across all pages
        nodes: Rows on this page, in listing order
        more: Cursor for the next page; present only when this page is full
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    total: int = Field(ge=0, description="Rows matching the filters on all pages")
    nodes: list[T] = Field(default_factory=list, description="Rows on this page")
    more: str | None = Field(
        default=None,
        description="Opaque cursor for the next page",
    )


__all__ = ["Page"]
