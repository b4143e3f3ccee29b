"""
Configuration management for the Renfort matching service.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from renfort.utils.constants import (
    DEFAULT_CANDIDATE_LIMIT,
    DEFAULT_SEARCH_RADIUS_KM,
    MAX_CANDIDATE_LIMIT,
)


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "renfort"
    username: str | None = None
    password: str | None = None


class MatchingSettings(BaseSettings):
    """Candidate matching defaults."""

    model_config = SettingsConfigDict(env_prefix="MATCHING_")

    default_radius_km: float = Field(default=DEFAULT_SEARCH_RADIUS_KM, gt=0)
    default_limit: int = Field(default=DEFAULT_CANDIDATE_LIMIT, ge=1, le=MAX_CANDIDATE_LIMIT)
    # Over-fetch factor applied to the limit before in-memory filtering
    fetch_multiplier: int = Field(default=3, ge=1)
    default_mission_hours: int = Field(default=8, ge=1)


class MailSettings(BaseSettings):
    """SMTP configuration for outgoing alerts."""

    model_config = SettingsConfigDict(env_prefix="MAIL_")

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    use_ssl: bool = False
    use_tls: bool = True
    sender: str = "no-reply@lesextras.fr"
    alert_recipient: Optional[str] = None
    timeout_seconds: int = 30
    max_workers: int = Field(default=2, ge=1)

    @property
    def is_configured(self) -> bool:
        """Whether an SMTP host is available."""
        return bool(self.smtp_host)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "renfort.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper() if isinstance(v, str) else v


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "Renfort"
    version: str = "0.1.0"
    description: str = "Geographic mission-to-talent matching engine"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Convenience exports
settings = get_settings()
