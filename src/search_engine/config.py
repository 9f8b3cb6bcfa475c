"""Centralized configuration for search-engine using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``SEARCH_ENGINE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Storage backend selection
    storage_backend: Literal["sqlite", "redis"] = Field(
        default="sqlite", description="Document store backend: relational (sqlite) or key-value (redis)"
    )
    sqlite_path: Path = Field(default=Path("storage.db"), description="SQLite database file")
    sqlite_busy_timeout_ms: int = Field(default=30000, ge=0, description="SQLite busy timeout in milliseconds")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    redis_key_prefix: str = Field(
        default="search-engine:document:", min_length=1, description="Prefix for document keys in Redis"
    )

    # Connection pool
    pool_max_connections: int = Field(default=8, ge=1, description="Maximum pooled storage connections")
    pool_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Seconds to wait for a pooled connection before failing"
    )

    # Query and ingestion behavior
    default_result_limit: int = Field(default=10, ge=1, description="Results returned when no limit is given")
    description_segment_count: int = Field(
        default=3, ge=0, description="Leading segments joined into a description when none is supplied"
    )
    corrupt_record_policy: Literal["skip", "raise"] = Field(
        default="skip", description="Skip (with a warning) or abort the query on undecodable records"
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Observability export
    otlp_endpoint: str = Field(default="", description="OTLP collector endpoint; empty disables export")
    otlp_protocol: Literal["grpc", "http"] = Field(default="http", description="OTLP transport protocol")
    service_name: str = Field(default="search-engine", description="Service name reported to the collector")

    @model_validator(mode="after")
    def _check_log_level(self) -> "Settings":
        if self.log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {self.log_level}")
        return self

    def is_observability_export_enabled(self) -> bool:
        """Check whether OTLP export has a collector to talk to."""
        return bool(self.otlp_endpoint.strip())
