"""GraphQL feature module using Strawberry.

This module provides the read-only access API at /graphql with:
- Query resolvers for items, units and authors
- Batched relationship loading through request-scoped loaders
- Cursor pagination via opaque ``more`` tokens
"""

from __future__ import annotations

from typing import Any

__all__ = ["router", "schema"]


def __getattr__(name: str) -> Any:
    if name == "router":
        from scholar_service.features.graphql.router import create_graphql_router

        return create_graphql_router()
    if name == "schema":
        from scholar_service.features.graphql.schema import schema as graphql_schema

        return graphql_schema
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
