"""Tests for environment configuration and logging setup."""

from __future__ import annotations

import io
import logging

import orjson
import pytest
from pydantic import ValidationError

from crawlcase.foundation.config import CrawlcaseSettings, get_settings
from crawlcase.runtime.observability import configure_logging

ENV_VARS = (
    "FIRECRAWL_API_KEY", "FIRECRAWL_API_URL", "FIRECRAWL_HTTP_TIMEOUT",
    "FIRECRAWL_RETRY_MAX_ATTEMPTS", "FIRECRAWL_RETRY_INITIAL_DELAY", "FIRECRAWL_RETRY_MAX_DELAY",
    "FIRECRAWL_RETRY_BACKOFF_FACTOR", "FIRECRAWL_CREDIT_WARNING_THRESHOLD", "FIRECRAWL_CREDIT_CRITICAL_THRESHOLD",
    "FIRECRAWL_BATCH_CONCURRENCY", "FIRECRAWL_BATCH_POLL_INTERVAL", "FIRECRAWL_BATCH_POLL_TIMEOUT", "FIRECRAWL_LOG_LEVEL", "FIRECRAWL_LOG_FORMAT",
    "SSE_LOCAL", "PORT", "HOST",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No inherited variables and no stray .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = CrawlcaseSettings()
    assert (s.retry.max_attempts, s.retry.initial_delay, s.retry.max_delay, s.retry.backoff_factor) == (3, 1000, 10000, 2)
    assert (s.credit.warning_threshold, s.credit.critical_threshold) == (1000, 100)
    assert (s.batch.concurrency, s.batch.poll_interval, s.batch.poll_timeout) == (1, 2.0, 300.0)
    assert (s.logging.level, s.logging.format) == ("INFO", "text")
    assert s.server.api_key is None
    assert s.server.base_url == "https://api.firecrawl.dev"
    assert not s.server.is_self_hosted
    assert s.server.transport == "stdio"
    assert s.server.port == 3000


def test_environment_overrides(clean_env) -> None:
    clean_env.setenv("FIRECRAWL_RETRY_MAX_ATTEMPTS", "5")
    clean_env.setenv("FIRECRAWL_RETRY_INITIAL_DELAY", "250")
    clean_env.setenv("FIRECRAWL_CREDIT_WARNING_THRESHOLD", "2000")
    clean_env.setenv("FIRECRAWL_BATCH_CONCURRENCY", "3")
    clean_env.setenv("FIRECRAWL_LOG_LEVEL", "debug")
    clean_env.setenv("FIRECRAWL_API_KEY", "fc-test")
    clean_env.setenv("FIRECRAWL_API_URL", "http://localhost:3002/")
    clean_env.setenv("SSE_LOCAL", "true")
    clean_env.setenv("PORT", "8080")

    s = CrawlcaseSettings()

    assert s.retry.max_attempts == 5 and s.retry.initial_delay == 250
    assert s.credit.warning_threshold == 2000
    assert s.batch.concurrency == 3
    assert s.logging.level == "DEBUG"
    assert s.server.api_key.get_secret_value() == "fc-test"
    assert s.server.base_url == "http://localhost:3002"
    assert s.server.is_self_hosted
    assert s.server.transport == "sse"
    assert s.server.port == 8080


def test_env_file(clean_env, tmp_path) -> None:
    (tmp_path / ".env").write_text("FIRECRAWL_RETRY_MAX_DELAY=500\nFIRECRAWL_API_KEY=fc-file\n")
    s = CrawlcaseSettings()
    assert s.retry.max_delay == 500
    assert s.server.api_key.get_secret_value() == "fc-file"


@pytest.mark.parametrize(
    ("name", "value"),
    [("FIRECRAWL_RETRY_MAX_ATTEMPTS", "0"), ("FIRECRAWL_BATCH_CONCURRENCY", "-1"), ("FIRECRAWL_LOG_FORMAT", "xml")],
)
def test_invalid_values_rejected(clean_env, name: str, value: str) -> None:
    clean_env.setenv(name, value)
    with pytest.raises(ValidationError):
        CrawlcaseSettings()


def test_get_settings_is_cached(clean_env) -> None:
    assert get_settings() is get_settings()


# ═════════════════════════════════════════════════════════════════════════════
# Logging
# ═════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def restore_logger():
    logger = logging.getLogger("crawlcase")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_text_logging(restore_logger) -> None:
    out = io.StringIO()
    configure_logging("text", "INFO", output=out)

    logging.getLogger("crawlcase.usage").warning("Credit usage has reached warning threshold: %d", 1200)
    logging.getLogger("crawlcase.usage").debug("hidden")

    line = out.getvalue().strip()
    assert "[warning] crawlcase.usage: Credit usage has reached warning threshold: 1200" in line
    assert "hidden" not in out.getvalue()


def test_json_logging(restore_logger) -> None:
    out = io.StringIO()
    configure_logging("json", "DEBUG", output=out)

    logging.getLogger("crawlcase.batch").info("Processing %s", "batch_1", extra={"urls": 2})

    record = orjson.loads(out.getvalue().splitlines()[0])
    assert record["level"] == "info"
    assert record["logger"] == "crawlcase.batch"
    assert record["event"] == "Processing batch_1"
    assert record["urls"] == 2


def test_reconfigure_replaces_handler(restore_logger) -> None:
    configure_logging(output=io.StringIO())
    configure_logging(output=io.StringIO())
    assert len(restore_logger.handlers) == 1


def test_unknown_format(restore_logger) -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging("xml")
