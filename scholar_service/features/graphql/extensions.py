"""Strawberry extensions for the GraphQL schema.

Provides:
- Query depth limiting (max depth=10)
- Masking of unexpected errors, while application errors (bad arguments,
  invalid cursors, restricted fields, store failures) keep their message
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from strawberry.extensions import MaskErrors, QueryDepthLimiter

from scholar_service.core.exceptions import AppException

if TYPE_CHECKING:
    from collections.abc import Callable

    from graphql import GraphQLError
    from strawberry.extensions import SchemaExtension

logger = logging.getLogger(__name__)

# Maximum query depth to prevent deeply nested queries
MAX_QUERY_DEPTH = 10


def should_mask_error(error: GraphQLError) -> bool:
    """Mask errors that did not originate from an ``AppException``.

    Validation and syntax errors have no original error and are never masked.
    """
    original = error.original_error
    if original is None or isinstance(original, AppException):
        return False
    logger.error(
        "Unexpected error while resolving %s",
        ".".join(str(p) for p in error.path or ()),
        exc_info=original,
    )
    return True


def get_extensions(*, debug: bool = False) -> list[Callable[[], SchemaExtension]]:
    """Get list of Strawberry extensions for the schema.

    Each entry is a factory so every operation gets its own extension
    instances.

    Args:
        debug: Show unexpected error messages instead of masking them

    Returns:
        List of extension factories
    """
    extensions: list[Callable[[], SchemaExtension]] = [
        # Limit query depth to prevent abuse
        partial(QueryDepthLimiter, max_depth=MAX_QUERY_DEPTH),
    ]
    if not debug:
        extensions.append(partial(MaskErrors, should_mask_error=should_mask_error))

    logger.debug("GraphQL extensions configured: depth limit=%d, masking=%s", MAX_QUERY_DEPTH, not debug)
    return extensions


__all__ = ["MAX_QUERY_DEPTH", "get_extensions", "should_mask_error"]
