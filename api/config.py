"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 1
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    rate_limit_enabled: bool = True  # Set to False to disable rate limiting in dev

    # Redis (job queue)
    redis_url: RedisDsn = RedisDsn("redis://localhost:6379/0")

    # PageSpeed Insights
    pagespeed_api_key: str | None = None
    pagespeed_strategy: Literal["mobile", "desktop"] = "mobile"
    pagespeed_timeout_seconds: float = 60.0

    # Analysis
    default_monthly_revenue: float = 10000.0  # ROI figures when the store reports none
    analysis_job_timeout: int = 600  # seconds
    max_batch_themes: int = 25

    # Sentry
    sentry_dsn: str | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def pagespeed_enabled(self) -> bool:
        """Check if Core Web Vitals can be measured."""
        return bool(self.pagespeed_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
