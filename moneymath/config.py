"""
Application configuration using Pydantic Settings.

Only the service layer reads settings; the calculation engines keep their
numeric constants at module level and never consult configuration.
"""

import os
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """Pick .env.production when APP_ENV=production, else .env.development."""
    if os.getenv("APP_ENV", "development") == "production":
        return ".env.production"
    return ".env.development"


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "MoneyMath Calculators"
    app_env: str = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    api_prefix: str = "/api"

    # Starting point for the XIRR search when the caller gives none
    xirr_guess_percent: float = 10.0

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
