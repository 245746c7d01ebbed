"""Configuration settings for stubidp using Pydantic Settings.

Settings are read once from the environment (and an optional ``.env`` file)
and cached for the process lifetime.
"""

import logging
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stubidp.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Dialect = Literal["postgres", "sqlite"]


class Settings(BaseSettings):
    """Central configuration management with Pydantic validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="info",
        description="Log level name (debug, info, warning, error)",
    )

    # ========================================
    # Provider Settings
    # ========================================
    oidc_issuer: str = Field(
        default="http://localhost:3000",
        description="Issuer identifier advertised by the OIDC provider",
    )

    client_id: str | None = Field(
        default=None,
        description="Client ID of the statically registered client",
    )

    client_secret: str | None = Field(
        default=None,
        description="Client secret of the statically registered client",
    )

    redirect_uri: str | None = Field(
        default=None,
        description="Redirect URI of the statically registered client",
    )

    # ========================================
    # Database Settings
    # ========================================
    database_dialect: Dialect | None = Field(
        default=None,
        description="Storage dialect (postgres or sqlite). Unset keeps in-memory storage.",
    )

    database_url: str | None = Field(
        default=None,
        description="PostgreSQL connection string or SQLite database file path",
    )

    @field_validator("database_dialect", mode="before")
    @classmethod
    def normalize_dialect(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lower()
            if not value:
                return None
            if value == "postgresql":
                return "postgres"
        return value

    @model_validator(mode="after")
    def require_database_url(self) -> "Settings":
        if self.database_dialect and not self.database_url:
            msg = f"DATABASE_URL is required when DATABASE_DIALECT={self.database_dialect}"
            raise ConfigurationError(msg)
        return self

    @property
    def persistence_enabled(self) -> bool:
        return self.database_dialect is not None


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
        logger.info("Settings initialized from environment")
        logger.debug("Database dialect: %s", _settings_instance.database_dialect)
        if not _settings_instance.persistence_enabled:
            logger.warning(
                "DATABASE_DIALECT is not set. The provider will use in-memory storage.",
            )
    return _settings_instance


def reset_settings() -> None:
    """Reset settings instance (useful for testing)."""
    global _settings_instance
    _settings_instance = None
