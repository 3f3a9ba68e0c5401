"""Logging configuration settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Structured logging configuration.

    Environment variables use LOG_ prefix.
    Example: LOG_LEVEL=INFO, LOG_JSON_LOGS=true
    """

    service_name: str = Field(
        default="scholar-service",
        description="Service name to include in log records (static field in JSON)",
    )
    level: LogLevel = Field(
        default="INFO",
        description="Root logger level (DEBUG|INFO|WARNING|ERROR|CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="Enable JSON Lines (JSONL) formatted structured logs",
    )
    include_context: bool = Field(
        default=True,
        description="Inject request context (request_id, etc.) into every record",
    )
    include_uvicorn: bool = Field(
        default=True,
        description="Route uvicorn loggers through the same handlers",
    )
    sqlalchemy_level: LogLevel = Field(
        default="WARNING",
        description="Level for the sqlalchemy.engine logger",
    )
    logger_levels: dict[str, LogLevel] = Field(
        default_factory=dict,
        description="Per-logger level overrides, e.g. {'scholar_service.core.batching': 'DEBUG'}",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    def formatter_name(self) -> str:
        return "json" if self.json_logs else "text"

    def static_fields(self) -> dict[str, Any]:
        return {"service": self.service_name}
