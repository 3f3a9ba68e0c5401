"""Logging configuration setup.

Provides production-ready logging configuration using:
- dictConfig for root and per-logger levels
- QueueHandler + QueueListener for non-blocking I/O
- ContextInjectingFilter for automatic context propagation
- JSONL format for machine parsing
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from typing import TYPE_CHECKING, Any

from scholar_service.infra.logging.context import ContextInjectingFilter
from scholar_service.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from scholar_service.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False
logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def shutdown() -> None:
    """Stop the QueueListener, flushing pending records."""
    global _log_queue, _listener

    if _listener is not None:
        _listener.stop()
        _listener = None
    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from scholar_service.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(
        log_level=log_settings.level,
        json_logs=log_settings.json_logs,
        include_context=log_settings.include_context,
        include_uvicorn=log_settings.include_uvicorn,
        static=log_settings.static_fields(),
        logger_levels={
            "sqlalchemy.engine": log_settings.sqlalchemy_level,
            **log_settings.logger_levels,
        },
    )
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    include_context: bool = True,
    include_uvicorn: bool = True,
    static: dict[str, Any] | None = None,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All output goes through one QueueHandler on the root logger; a
    QueueListener thread does the actual writing to stderr.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL structured logging.
        include_context: Inject the contextvars log context into records.
        include_uvicorn: Let uvicorn loggers propagate to the root handlers.
        static: Fields added to every JSON record (e.g. service name).
        logger_levels: Per-logger level overrides.

    Example:
        configure_logging(
            log_level="DEBUG",
            json_logs=False,
            logger_levels={"sqlalchemy.engine": "INFO"},
        )
    """
    global _log_queue, _listener

    shutdown()

    loggers: dict[str, Any] = {
        name: {"level": level.upper()} for name, level in (logger_levels or {}).items()
    }
    if include_uvicorn:
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            loggers[name] = {"handlers": [], "propagate": True}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "loggers": loggers,
            "root": {"level": log_level.upper(), "handlers": []},
        }
    )

    console_handler = logging.StreamHandler()
    if json_logs:
        console_handler.setFormatter(JSONFormatter(static=static))
    else:
        console_handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    _log_queue = Queue()
    _listener = QueueListener(_log_queue, console_handler, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    queue_handler = QueueHandler(_log_queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(queue_handler)
    logger.debug("Logging configured", extra={"json_logs": json_logs, "level": log_level})


__all__ = ["configure_logging", "setup_logging", "shutdown"]
