"""Environment-based configuration using pydantic-settings.

Example:
    >>> from async_rx.config import get_settings
    >>> settings = get_settings()
    >>> settings.logging.level
    'WARNING'
    >>> settings.streams.strict_termination
    False

    # Or with environment variables:
    # ASYNC_RX_LOG_LEVEL=DEBUG
    # ASYNC_RX_STREAM_STRICT_TERMINATION=true
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ASYNC_RX_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        """Accept lowercase level names."""
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


class StreamSettings(BaseSettings):
    """Adapter behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="ASYNC_RX_STREAM_",
        extra="ignore",
    )

    strict_termination: bool = Field(
        default=False,
        description="Raise StreamTerminatedError when an adapter is polled after completion",
    )


class AsyncRxSettings(BaseSettings):
    """Root settings for async-rx.

    Loads configuration from environment variables with the ASYNC_RX_
    prefix and an optional .env file.

    Example environment variables:
        ASYNC_RX_DEBUG=true
        ASYNC_RX_LOG_FORMAT=json
        ASYNC_RX_STREAM_STRICT_TERMINATION=true
    """

    model_config = SettingsConfigDict(
        env_prefix="ASYNC_RX_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    streams: StreamSettings = Field(default_factory=StreamSettings)

    @computed_field
    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured level."""
        return "DEBUG" if self.debug else self.logging.level


@lru_cache(maxsize=1)
def get_settings() -> AsyncRxSettings:
    """Get the global settings instance (cached)."""
    return AsyncRxSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
