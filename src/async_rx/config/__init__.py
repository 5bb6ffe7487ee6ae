"""Configuration management using pydantic-settings."""

from .settings import (
    AsyncRxSettings,
    LoggingSettings,
    StreamSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "AsyncRxSettings",
    "LoggingSettings",
    "StreamSettings",
    "clear_settings_cache",
    "get_settings",
]
