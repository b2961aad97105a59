"""Configuration management for loadstate."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import configure_logging


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOADSTATE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Receiver Configuration
    default_error_message: str = Field(
        default="Something went wrong.", description="Message used when a failure carries none"
    )

    # View Configuration
    minimum_render_threshold_ms: Optional[float] = Field(
        None, description="Delay before a loading state may be shown, in milliseconds"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: str = Field(default="default", description="Log profile ('default' or 'rich')")

    @field_validator("minimum_render_threshold_ms")
    @classmethod
    def _non_negative_threshold(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 0:
            raise ValueError("minimum_render_threshold_ms must be non-negative")
        return value


def get_settings(**overrides: object) -> Settings:
    """Get application settings and configure logging from them.

    Args:
        overrides: Field values that take precedence over the environment

    Returns:
        Settings instance
    """
    settings = Settings(**overrides)
    configure_logging(profile="rich" if settings.log_profile == "rich" else "default", level=settings.log_level)
    return settings
