"""Logging setup for the server process.

Modules log through standard ``logging.getLogger("crawlcase.<area>")``
loggers. ``configure_logging`` attaches a single handler to the ``crawlcase``
root logger that renders either human-readable lines or JSON Lines.

Output always goes to stderr: with the stdio transport, stdout carries the
MCP protocol and must stay clean.

Quick Start:
    >>> from crawlcase.runtime.observability import configure_logging
    >>> configure_logging(level="DEBUG")               # console lines
    >>> configure_logging(format="json", level="INFO")  # JSON Lines
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

import orjson

if TYPE_CHECKING:
    from crawlcase.foundation.config import LoggingSettings

ROOT_LOGGER = "crawlcase"

# LogRecord attributes that are not user-supplied extras
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _extras(record: logging.LogRecord) -> dict[str, object]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


class ConsoleFormatter(logging.Formatter):
    """Format: HH:MM:SS.mmm [level] logger: message key=value ..."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=UTC).strftime("%H:%M:%S.%f")[:-3]
        parts = [ts, f"[{record.levelname.lower()}]", f"{record.name}:", record.getMessage()]
        parts.extend(f"{k}={v}" for k, v in sorted(_extras(record).items()))
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JsonFormatter(logging.Formatter):
    """JSON Lines output for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(data, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    format: str = "text",  # noqa: A002 - matches the FIRECRAWL_LOG_FORMAT setting
    level: str = "INFO",
    *,
    output: TextIO | None = None,
) -> logging.Handler:
    """Install the crawlcase log handler, replacing any previous one.

    Args:
        format: "text" (human) or "json" (machine)
        level: Minimum log level - DEBUG, INFO, WARNING, ERROR, CRITICAL
        output: Stream to write to (default: stderr)

    Returns:
        The installed handler
    """
    formatters: dict[str, type[logging.Formatter]] = {"text": ConsoleFormatter, "json": JsonFormatter}
    if format not in formatters:
        raise ValueError(f"Unknown format: {format}. Use 'text' or 'json'")

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatters[format]())

    root = logging.getLogger(ROOT_LOGGER)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.propagate = False
    return handler


def configure_from_settings(settings: LoggingSettings, *, output: TextIO | None = None) -> logging.Handler:
    return configure_logging(settings.format, settings.level, output=output)
