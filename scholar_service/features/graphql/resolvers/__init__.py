"""GraphQL resolvers.

This package contains:
- queries.py: Query resolvers for items, units and authors
"""

from __future__ import annotations

from scholar_service.features.graphql.resolvers.queries import Query

__all__ = ["Query"]
