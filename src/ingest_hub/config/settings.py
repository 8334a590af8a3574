"""
Configuration management for ingest_hub.

This module provides environment-based configuration using Pydantic BaseSettings,
so the database location, logging level and ingestion defaults can be changed per
deployment without touching code.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("INGEST_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Field names are uppercase and read without prefix:
    - DATABASE_URL: SQLite database URL (sqlite:///path/to/file.db)
    - LOG_LEVEL: Logging level (uppercase)
    - INGEST_FAIL_POLICY: Default per-row failure policy
    - INGEST_BATCH_MODE: Default statement batching mode
    - DB_BATCH_SIZE: Records buffered per schema-less resolution window
    - MAX_ROWS_PER_STATEMENT: Row bound for multi-row INSERT statements
    - MAX_BOUND_PARAMETERS: Placeholder bound for one statement
    """

    DATABASE_URL: str = Field(
        default="sqlite:///ingest_hub.db",
        validation_alias="DATABASE_URL",
        description="SQLite database URL",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )
    INGEST_FAIL_POLICY: Literal["fail_fast", "best_effort"] = Field(
        default="fail_fast",
        validation_alias="INGEST_FAIL_POLICY",
        description="Default per-row failure policy",
    )
    INGEST_BATCH_MODE: Literal["per_row", "multi_row"] = Field(
        default="per_row",
        validation_alias="INGEST_BATCH_MODE",
        description="Default statement batching mode",
    )
    DB_BATCH_SIZE: int = Field(
        default=1000,
        gt=0,
        validation_alias="DB_BATCH_SIZE",
        description="Records buffered per schema-less resolution window",
    )
    MAX_ROWS_PER_STATEMENT: int = Field(
        default=500,
        gt=0,
        validation_alias="MAX_ROWS_PER_STATEMENT",
        description="Maximum rows in one multi-row INSERT statement",
    )
    MAX_BOUND_PARAMETERS: int = Field(
        # SQLITE_MAX_VARIABLE_NUMBER default since SQLite 3.32
        default=32766,
        gt=0,
        validation_alias="MAX_BOUND_PARAMETERS",
        description="Maximum bound placeholders in one statement",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    def get_database_path(self) -> str:
        """Return the filesystem path (or ``:memory:``) named by DATABASE_URL."""
        from ingest_hub.io.connectors.sqlite_gateway import database_path_from_url

        return database_path_from_url(self.DATABASE_URL)

    model_config = SettingsConfigDict(
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
