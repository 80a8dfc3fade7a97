"""Process settings read from the environment and an optional .env file."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-level configuration for the media-reliability bot.

    Fields map to unprefixed environment variables (REDDIT_CLIENT_ID and
    so on), matched case-insensitively.
    Report behaviour (registry, flair, footer) lives in ReporterConfig.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Reddit API (script app, password grant)
    reddit_client_id: str | None = None
    reddit_client_secret: str | None = None
    reddit_username: str | None = None
    reddit_password: str | None = None
    reddit_user_agent: str = "media-reliability/0.1.0"

    # Rate limits (requests per minute)
    reddit_rate_limit: int = 60

    # HTTP retry configuration
    http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_http_retries: int = Field(default=3, ge=0, le=10)
    max_backoff_seconds: float = Field(default=60.0, ge=1.0, le=300.0)

    @property
    def is_production(self) -> bool:
        """JSON log output is used in production."""
        return self.environment == "production"

    @property
    def reddit_configured(self) -> bool:
        """True once all four password-grant credentials are set."""
        return all([
            self.reddit_client_id,
            self.reddit_client_secret,
            self.reddit_username,
            self.reddit_password,
        ])


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process; tests call get_settings.cache_clear()."""
    return Settings()
