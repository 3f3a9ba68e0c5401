"""Database infrastructure: engine, session factory and health check."""

from scholar_service.infra.database.session import (
    check_database,
    create_engine,
    create_session_factory,
    dispose_engine,
    get_engine,
    get_session_factory,
)

__all__ = [
    "check_database",
    "create_engine",
    "create_session_factory",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
