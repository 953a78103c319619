"""Environment-based configuration using pydantic-settings.

Example:
    >>> from brewteco_mcp.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.timeout
    30.0

    # Or with environment variables:
    # BREWTECO_API_URL=http://reports.internal/api/v1
    # BREWTECO_RETRIES=5
    # BREWTECO_LOG_LEVEL=DEBUG
    # MCP_PORT=3710
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import AliasChoices, Field, NonNegativeFloat, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "http://localhost:3700/api/v1"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BREWTECO_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class HttpListenerSettings(BaseSettings):
    """Address of the plain HTTP / SSE listeners."""

    model_config = SettingsConfigDict(
        env_prefix="BREWTECO_HTTP_",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = "127.0.0.1"
    port: Annotated[int, Field(
        ge=1, le=65535,
        validation_alias=AliasChoices("BREWTECO_HTTP_PORT", "MCP_PORT"),
    )] = 3710


class GatewaySettings(BaseSettings):
    """Root settings for the gateway.

    Backend settings are read once at construction and never change for the
    lifetime of a client.
    """

    model_config = SettingsConfigDict(
        env_prefix="BREWTECO_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the reports API")
    timeout: PositiveFloat = Field(default=30.0, description="Per-attempt timeout in seconds")
    retries: Annotated[int, Field(ge=0, le=10)] = 3
    retry_delay: NonNegativeFloat = Field(default=1.0, description="Fixed delay between attempts")
    user_agent: str = "Brewteco-MCP-Server/1.0.0"

    server_name: str = "brewteco-mcp-server"
    server_version: str = "1.0.0"

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HttpListenerSettings = Field(default_factory=HttpListenerSettings)

    @field_validator("api_url")
    @classmethod
    def _validate_api_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")
        return v.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """Get the global settings instance (cached)."""
    return GatewaySettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
