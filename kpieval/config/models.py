"""Configuration models for kpieval."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DatabaseSettings(BaseModel):
    """DuckDB storage settings."""

    path: str = Field(
        default="kpieval.duckdb",
        description="DuckDB file, relative to the project directory (or :memory:)",
    )


class LoggingSettings(BaseModel):
    """Root logger settings."""

    level: str = Field(default="INFO", description="Log level name")
    format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging format string",
    )


class KpievalConfig(BaseModel):
    """Root configuration model."""

    version: int = Field(default=1)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
