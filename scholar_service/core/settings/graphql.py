"""GraphQL server configuration settings.

Controls the GraphQL endpoint, IDE, and the batched resolution scheduler.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GraphQLIDE = Literal["graphiql", "apollo-sandbox", "pathfinder", False]


class GraphQLSettings(BaseSettings):
    """GraphQL server configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_ENABLED=true, GRAPHQL_MAX_SCHEDULER_PASSES=50
    """

    enabled: bool = Field(
        default=True,
        description="Enable GraphQL endpoint",
    )
    path: str = Field(
        default="/graphql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL endpoint path",
    )
    graphql_ide: GraphQLIDE = Field(
        default="graphiql",
        description="GraphQL IDE to use: graphiql, apollo-sandbox, pathfinder, or false to disable",
    )

    # Resolution scheduler
    max_scheduler_passes: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Maximum loader flush rounds per request before failing loudly",
    )
    settle_ticks: int = Field(
        default=3,
        ge=0,
        le=100,
        description="Event-loop yields before each flush round so sibling resolvers can queue keys",
    )
    concurrent_flush: bool = Field(
        default=True,
        description="Run the batched queries of one round concurrently",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
