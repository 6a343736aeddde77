"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from line_echo_bot.constants import LINE_API_TIMEOUT_SECONDS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LINE Configuration
    line_channel_access_token: str = Field(
        ..., description="LINE channel access token (long-lived)"
    )
    line_channel_secret: str | None = Field(
        default=None,
        description="LINE channel secret (optional, for signature verification)",
    )

    # Public URL of this server, used to build links to downloaded media
    base_url: str = Field(
        ..., description="Publicly reachable base URL (e.g. https://bot.example.com)"
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    line_api_timeout_seconds: float = Field(
        default=LINE_API_TIMEOUT_SECONDS,
        description="Timeout for LINE reply API calls (seconds)",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
