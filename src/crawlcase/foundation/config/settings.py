"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with the defaults the server has always used. Supports .env files.

Example:
    >>> from crawlcase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    3
    >>> settings.credit.critical_threshold
    100

    # Or with environment variables:
    # FIRECRAWL_RETRY_MAX_ATTEMPTS=5
    # FIRECRAWL_CREDIT_WARNING_THRESHOLD=2000
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import (
    AliasChoices,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    computed_field,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.firecrawl.dev"


class RetrySettings(BaseSettings):
    """Backoff executor configuration. Delays are in milliseconds."""

    model_config = SettingsConfigDict(
        env_prefix="FIRECRAWL_RETRY_",
        env_file=".env",
        extra="ignore",
    )

    max_attempts: PositiveInt = Field(default=3, description="Total attempts including the first call")
    initial_delay: NonNegativeInt = Field(default=1000, description="Delay before the first retry (ms)")
    max_delay: NonNegativeInt = Field(default=10000, description="Upper bound for any single delay (ms)")
    backoff_factor: PositiveInt = Field(default=2, description="Exponential growth factor")


class CreditSettings(BaseSettings):
    """Cumulative credit usage thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="FIRECRAWL_CREDIT_",
        env_file=".env",
        extra="ignore",
    )

    warning_threshold: NonNegativeInt = 1000
    critical_threshold: NonNegativeInt = 100


class BatchSettings(BaseSettings):
    """Batch scheduler configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRECRAWL_BATCH_",
        env_file=".env",
        extra="ignore",
    )

    concurrency: PositiveInt = Field(default=1, description="Max batch jobs executing at once")
    poll_interval: PositiveFloat = Field(default=2.0, description="Seconds between remote job status polls")
    poll_timeout: PositiveFloat = Field(default=300.0, description="Seconds to wait for a remote job before failing it")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRECRAWL_LOG_",
        env_file=".env",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class ServerSettings(BaseSettings):
    """Remote service credentials and transport selection."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: SecretStr | None = Field(default=None, validation_alias=AliasChoices("FIRECRAWL_API_KEY"))
    api_url: str | None = Field(default=None, validation_alias=AliasChoices("FIRECRAWL_API_URL"))
    http_timeout: PositiveFloat = Field(default=60.0, validation_alias=AliasChoices("FIRECRAWL_HTTP_TIMEOUT"))
    sse_local: bool = Field(default=False, validation_alias=AliasChoices("SSE_LOCAL"))
    host: str = Field(default="127.0.0.1", validation_alias=AliasChoices("HOST"))
    port: PositiveInt = Field(default=3000, validation_alias=AliasChoices("PORT"))

    @computed_field
    @property
    def base_url(self) -> str:
        return (self.api_url or DEFAULT_API_URL).rstrip("/")

    @computed_field
    @property
    def is_self_hosted(self) -> bool:
        return self.api_url is not None

    @computed_field
    @property
    def transport(self) -> Literal["stdio", "sse"]:
        return "sse" if self.sse_local else "stdio"


class CrawlcaseSettings(BaseSettings):
    """Root settings.

    Each section reads its own environment prefix:
        FIRECRAWL_RETRY_*    backoff executor
        FIRECRAWL_CREDIT_*   usage thresholds
        FIRECRAWL_BATCH_*    scheduler
        FIRECRAWL_LOG_*      logging
        FIRECRAWL_API_KEY / FIRECRAWL_API_URL / SSE_LOCAL / PORT   server
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    credit: CreditSettings = Field(default_factory=CreditSettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


@lru_cache(maxsize=1)
def get_settings() -> CrawlcaseSettings:
    """Get the global settings instance (cached)."""
    return CrawlcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
