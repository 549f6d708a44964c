"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- Both logs live as JSON documents under DATA_DIR
- Listens on port 3000 unless told otherwise
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )

    # Server Configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )
    PORT: int = Field(
        default=3000,
        description="Port the HTTP server listens on"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level applied when the server starts"
    )

    # Storage Configuration
    # Relative file names are resolved against DATA_DIR
    DATA_DIR: Path = Field(
        default_factory=Path.cwd,
        description="Directory holding the visit and muted log documents"
    )
    VISITS_FILE: str = Field(
        default="visits.json",
        description="File name of the active visit log"
    )
    MUTED_FILE: str = Field(
        default="muted.json",
        description="File name of the muted visit log"
    )

    # Rate Limiting Configuration
    # Format: "count/period" (e.g., "30/minute" means 30 requests per minute)
    TRACK_RATE_LIMIT: str = Field(
        default="30/minute",
        description="Per-IP quota for the /track endpoint"
    )

    CORS_ORIGINS: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser"
    )

    @property
    def visits_path(self) -> Path:
        return Path(self.DATA_DIR) / self.VISITS_FILE

    @property
    def muted_path(self) -> Path:
        return Path(self.DATA_DIR) / self.MUTED_FILE


settings = Settings()
