"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Prefix: SHEETSQL_
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEETSQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(
        default=Path("./sheetsql_data"),
        description="Directory holding data.duckdb (tables) and metadata.db (upload history)",
    )
    duckdb_memory_limit: str = Field(
        default="2GB",
        description="Memory limit for DuckDB",
    )

    # Query guard
    query_max_rows: int = Field(
        default=50_000,
        ge=1,
        description="Maximum rows returned by a single query",
    )
    query_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Wall-clock limit for a single query",
    )

    # Ingestion
    ingest_max_rows: int = Field(
        default=2_000_000,
        ge=0,
        description="Cumulative row cap across all sheets of one upload",
    )
    ingest_max_upload_bytes: int = Field(
        default=256 * 1024 * 1024,
        description="Largest accepted archive upload",
    )
    ingest_max_member_bytes: int = Field(
        default=512 * 1024 * 1024,
        description="Largest uncompressed archive member that will be read",
    )
    ingest_max_members: int = Field(
        default=200,
        description="Maximum number of workbook members processed per archive",
    )
    ingest_chunk_rows: int = Field(
        default=50_000,
        ge=1,
        description="Rows staged per insert batch when materializing a sheet",
    )

    # API
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
