"""Configuration management using pydantic-settings."""

from .settings import (
    DEFAULT_API_URL,
    GatewaySettings,
    HttpListenerSettings,
    LoggingSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_API_URL",
    "GatewaySettings",
    "HttpListenerSettings",
    "LoggingSettings",
    "clear_settings_cache",
    "get_settings",
]
