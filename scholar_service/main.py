"""Entry point: run the API under uvicorn.

    python -m scholar_service.main
"""

from __future__ import annotations

import uvicorn

from scholar_service.core.settings import get_app_settings, get_logging_settings


def run() -> None:
    """Run the FastAPI application server with settings from configuration."""
    settings = get_app_settings()
    log_settings = get_logging_settings()

    uvicorn.run(
        "scholar_service.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )


if __name__ == "__main__":
    run()
