"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from scholar_service.app.exception_handlers import configure_exception_handlers
from scholar_service.app.lifespan import lifespan
from scholar_service.app.middleware import configure_middleware
from scholar_service.app.router import setup_routers
from scholar_service.core.settings import get_app_settings


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_app_settings()

    app = FastAPI(
        title=settings.title,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    configure_exception_handlers(app)
    configure_middleware(app)
    setup_routers(app)

    return app
