"""GraphQL schema assembly.

The access API is read-only: a single Query root with configured
extensions.
"""

from __future__ import annotations

import logging

import strawberry

from scholar_service.core.settings import get_app_settings
from scholar_service.features.graphql.extensions import get_extensions
from scholar_service.features.graphql.resolvers import Query

logger = logging.getLogger(__name__)

schema = strawberry.Schema(
    query=Query,
    extensions=get_extensions(debug=get_app_settings().debug),
)

logger.debug("GraphQL schema created successfully")

__all__ = ["schema"]
