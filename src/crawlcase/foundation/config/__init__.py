"""Configuration loaded from the environment."""

from .settings import (
    DEFAULT_API_URL,
    BatchSettings,
    CrawlcaseSettings,
    CreditSettings,
    LoggingSettings,
    RetrySettings,
    ServerSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_API_URL",
    "CrawlcaseSettings",
    "RetrySettings",
    "CreditSettings",
    "BatchSettings",
    "LoggingSettings",
    "ServerSettings",
    "get_settings",
    "clear_settings_cache",
]
