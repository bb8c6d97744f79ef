"""Observability: log handler setup."""

from .logging import ConsoleFormatter, JsonFormatter, configure_from_settings, configure_logging

__all__ = ["configure_logging", "configure_from_settings", "ConsoleFormatter", "JsonFormatter"]
