# snippetsync/config.py
"""
Centralized application configuration using pydantic-settings.

All settings are read from environment variables or .env file.
Share-code length, alphabet and lifetime live in constants.py on purpose:
they are part of the contract with the editor extension, not deployment knobs.
"""

import os
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # --- Database ---
    DB_URL: str = Field(
        default="postgresql://localhost:5432/snippetsync",
        description="Database connection URL (PostgreSQL or SQLite)"
    )
    DB_ECHO: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )
    DB_CREATE_TABLES: bool = Field(
        default=False,
        description="Create tables on startup instead of relying on Alembic"
    )

    # --- Redis (arq worker) ---
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )

    # --- Server ---
    HOST: str = Field(
        default="127.0.0.1",
        description="Server bind host"
    )
    PORT: int = Field(
        default=5000,
        description="Server bind port"
    )

    # --- Debug / Logging ---
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # --- Expired share-code sweep ---
    SWEEP_ENABLED: bool = Field(
        default=True,
        description="Run the in-process expired share-code sweep"
    )
    SWEEP_INTERVAL_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between expired share-code sweeps"
    )

    # --- Rate limiting ---
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=900,
        gt=0,
        description="Rate limit window for /api routes"
    )
    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=100,
        gt=0,
        description="Requests allowed per client per window on /api routes"
    )

    # --- Tracing ---
    OTEL_ENABLED: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing with the console exporter"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (singleton pattern)."""
    return Settings()


# --- Paths (computed, not from env) ---
PROJECT_ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
LOGS_PATH: str = os.environ.get("LOGS_PATH", os.path.join(PROJECT_ROOT, "logs"))
