"""Shared fixtures: settings cache reset, recording sleep, fake Firecrawl client."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from crawlcase.foundation.config import clear_settings_cache
from crawlcase.io import FirecrawlError


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays (seconds) and returns at once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def millis(self) -> list[int]:
        return [round(s * 1000) for s in self.calls]


class FakeFirecrawl:
    """In-memory FirecrawlClient replacement.

    ``script`` queues per-call outcomes for retried operations: an exception
    instance is raised, anything else is returned. When the queue is empty the
    default response is used.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.script: deque[Any] = deque()
        self.document: dict[str, Any] = {"markdown": "# Example\n\nHello", "html": "<h1>Example</h1>"}
        self.links: list[str] = ["https://example.com", "https://example.com/about"]
        self.crawl_status: dict[str, Any] = {
            "success": True, "status": "scraping", "completed": 1, "total": 3,
            "creditsUsed": 1, "expiresAt": "2026-10-19T00:00:00Z", "data": [],
        }
        self.search_results: list[dict[str, Any]] = [
            {"url": "https://example.com", "title": "Example", "description": "An example page"},
        ]
        self.extract_response: dict[str, Any] = {"success": True, "data": {"name": "Widget", "price": 10}}
        self.research_response: dict[str, Any] = {
            "success": True, "status": "completed",
            "data": {
                "finalAnalysis": "EVs emit less over their lifetime.",
                "activities": [{"message": "Searching", "depth": 1}],
                "sources": [{"url": "https://example.com/ev", "title": "EV study"}],
            },
        }
        self.llmstxt_response: dict[str, Any] = {
            "success": True, "status": "completed",
            "data": {"llmstxt": "# example.com", "llmsfulltxt": "# example.com full"},
        }
        self.batches: dict[str, list[str]] = {}
        self.wait_error: BaseException | None = None

    def _next(self, default: Any) -> Any:
        outcome = self.script.popleft() if self.script else default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def scrape_url(self, url: str, **options: Any) -> dict[str, Any]:
        self.calls.append(("scrape_url", (url,), options))
        return self._next(dict(self.document))

    async def map_url(self, url: str, **options: Any) -> list[str]:
        self.calls.append(("map_url", (url,), options))
        return self._next(list(self.links))

    async def async_crawl_url(self, url: str, **options: Any) -> dict[str, Any]:
        self.calls.append(("async_crawl_url", (url,), options))
        return self._next({"success": True, "id": "crawl-123", "url": url})

    async def check_crawl_status(self, crawl_id: str) -> dict[str, Any]:
        self.calls.append(("check_crawl_status", (crawl_id,), {}))
        return self._next(dict(self.crawl_status))

    async def search(self, query: str, **options: Any) -> list[dict[str, Any]]:
        self.calls.append(("search", (query,), options))
        return self._next(list(self.search_results))

    async def start_extract(self, urls: Sequence[str], **options: Any) -> dict[str, Any]:
        self.calls.append(("start_extract", (list(urls),), options))
        return self._next(dict(self.extract_response))

    async def wait_extract(self, job_id: str) -> dict[str, Any]:
        self.calls.append(("wait_extract", (job_id,), {}))
        return {"success": True, "status": "completed", "data": self.extract_response.get("data")}

    async def start_batch_scrape(self, urls: Sequence[str], options: Mapping[str, Any] | None = None) -> str:
        self.calls.append(("start_batch_scrape", (list(urls),), dict(options or {})))
        remote_id = self._next(f"remote-{len(self.batches) + 1}")
        self.batches[remote_id] = list(urls)
        return remote_id

    async def wait_batch_scrape(self, job_id: str, *, timeout: float | None = None) -> dict[str, Any]:
        self.calls.append(("wait_batch_scrape", (job_id,), {}))
        if self.wait_error is not None:
            raise self.wait_error
        urls = self.batches[job_id]
        return {
            "success": True, "status": "completed", "completed": len(urls), "total": len(urls),
            "creditsUsed": len(urls), "data": [{"url": u, "markdown": f"content of {u}"} for u in urls],
        }

    async def start_deep_research(self, query: str, **options: Any) -> str:
        self.calls.append(("start_deep_research", (query,), options))
        return self._next("research-1")

    async def wait_deep_research(self, job_id: str, *, timeout: float | None = None) -> dict[str, Any]:
        self.calls.append(("wait_deep_research", (job_id,), {"timeout": timeout}))
        return dict(self.research_response)

    async def start_llmstxt(self, url: str, **options: Any) -> str:
        self.calls.append(("start_llmstxt", (url,), options))
        return self._next("llms-1")

    async def wait_llmstxt(self, job_id: str) -> dict[str, Any]:
        self.calls.append(("wait_llmstxt", (job_id,), {}))
        return dict(self.llmstxt_response)

    def called(self, method: str) -> list[tuple[tuple[Any, ...], dict[str, Any]]]:
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]


def rate_limited(detail: str = "slow down") -> FirecrawlError:
    return FirecrawlError(f"Rate limit exceeded (status code 429). Error: {detail}", 429)


@pytest.fixture(autouse=True)
def reset_settings() -> object:
    """Clear cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_client() -> FakeFirecrawl:
    return FakeFirecrawl()


@pytest.fixture
def rate_limit_error() -> Callable[..., FirecrawlError]:
    """Factory for 429-shaped remote errors."""
    return rate_limited
