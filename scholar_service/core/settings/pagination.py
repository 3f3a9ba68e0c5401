"""Pagination settings for listings.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_FIRST=50
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_first: Page size when ``first`` is omitted.
        max_first: Largest accepted page size.
        cursor_version: Version stamped into every cursor; bump to invalidate
            outstanding cursors after an incompatible change.
    """

    default_first: int = Field(
        default=100,
        ge=1,
        le=500,
        description="Default page size when 'first' is not specified",
    )
    max_first: int = Field(
        default=500,
        ge=1,
        le=500,
        description="Maximum allowed page size (hard limit)",
    )
    cursor_version: int = Field(
        default=1,
        ge=1,
        description="Version stamped into pagination cursors",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
