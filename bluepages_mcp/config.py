"""
Location: bluepages_mcp/config.py

Summary:
    Runtime settings for bluepages-mcp, loaded from environment variables
    (and an optional .env file) with pydantic-settings.

Usage:
    server.py calls get_settings() once at startup and hands the result to
    auth.resolve_auth() and BluepagesClient.

Example:
    BLUEPAGES_API_KEY=bp_... bluepages-mcp
    PRIVATE_KEY=0x... bluepages-mcp
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_URL = "https://bluepages.fyi"


class Settings(BaseSettings):
    """
    bluepages-mcp settings.

    Attributes:
        bluepages_api_key: API key for credit-based access (BLUEPAGES_API_KEY)
        private_key: Ethereum private key for x402 payments (PRIVATE_KEY)
        bluepages_api_url: Base URL of the Bluepages API
        bluepages_timeout: HTTP timeout in seconds for upstream calls
        bluepages_log_level: Level for the stderr log handler
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bluepages_api_key: Optional[str] = None
    private_key: Optional[str] = None
    bluepages_api_url: str = DEFAULT_API_URL
    bluepages_timeout: float = 120.0
    bluepages_log_level: str = "INFO"


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
