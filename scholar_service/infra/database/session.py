"""Database engine and session factory.

The engine is built lazily from ``DatabaseSettings`` so importing the package
never opens a connection; tests point ``DB_DSN`` at a SQLite file before the
first call.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scholar_service.core.settings import get_db_settings
from scholar_service.infra.metrics.prometheus import database_connections_active

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from scholar_service.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine(db_settings: DatabaseSettings) -> AsyncEngine:
    """Create an async engine with pool instrumentation attached."""
    engine = create_async_engine(db_settings.dsn, **db_settings.sqlalchemy_engine_kwargs())
    _instrument_pool(engine)
    logger.info(
        "Database engine created",
        extra={"dialect": engine.dialect.name, "pool": type(engine.pool).__name__},
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it on first use."""
    return create_engine(get_db_settings())


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory bound to ``get_engine()``."""
    return create_session_factory(get_engine())


async def check_database() -> bool:
    """Run ``SELECT 1``; used by the health endpoint.

    Returns:
        True when the query succeeds, False on any database or socket error.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database check failed: %s", exc)
        return False
    return True


async def dispose_engine() -> None:
    """Close every pooled connection (application shutdown)."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
        get_session_factory.cache_clear()
        get_engine.cache_clear()
        logger.info("Database engine disposed")


def _instrument_pool(engine: AsyncEngine) -> None:
    pool = engine.sync_engine.pool

    @event.listens_for(pool, "connect")
    def _receive_connect(dbapi_conn: Any, connection_record: Any) -> None:
        database_connections_active.inc()
        logger.debug("Database connection established")

    @event.listens_for(pool, "close")
    def _receive_close(dbapi_conn: Any, connection_record: Any) -> None:
        database_connections_active.dec()
        logger.debug("Database connection closed")


__all__ = [
    "check_database",
    "create_engine",
    "create_session_factory",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
