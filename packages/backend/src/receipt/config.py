"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with RECEIPT_ prefix.
"""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via RECEIPT_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./data.db"
    migrate_legacy_ids: bool = True

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3123

    # CORS
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Pre-built single-page front end, served for non-API paths when set
    frontend_dir: Optional[Path] = None

    model_config = {"env_prefix": "RECEIPT_"}

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


# Singleton — import this everywhere
settings = Settings()
