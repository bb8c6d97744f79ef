"""Async client for the Firecrawl v1 REST API.

Thin wrapper over ``httpx.AsyncClient``. Every call either returns the useful
part of the response body or raises FirecrawlError; the error message always
carries the HTTP status code so rate-limit responses (429) are recognisable
to the retry executor even without the structured ``status_code``.

Long-running remote jobs (batch scrape, extract, deep research, LLMs.txt) are
split into ``start_*`` and ``wait_*``. Starting a job is not idempotent, so
callers retry only the start; waiting retries each status GET on its own and
never re-submits.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from crawlcase.foundation.config import DEFAULT_API_URL
from crawlcase.foundation.errors import JsonDict
from crawlcase.runtime.retry import DEFAULT_RETRY, RetryPolicy, execute_with_retry

if TYPE_CHECKING:
    from crawlcase.foundation.config import ServerSettings

logger = logging.getLogger("crawlcase.client")

ORIGIN = "mcp-server"
DEFAULT_POLL_TIMEOUT = 300.0
_TERMINAL_JOB_STATES = frozenset({"completed", "failed", "cancelled"})


class FirecrawlError(Exception):
    """Remote call failed. ``status_code`` is None for non-HTTP failures (bad body, failed job)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FirecrawlClient:
    """Firecrawl API client.

    Example:
        >>> async with FirecrawlClient(api_key="fc-...") as client:
        ...     doc = await client.scrape_url("https://example.com", formats=["markdown"])
        ...     doc["markdown"]
    """

    __slots__ = ("_http", "_poll_interval", "_poll_timeout", "_poll_retry")

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        *,
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        poll_retry: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._http = httpx.AsyncClient(
            base_url=(api_url or DEFAULT_API_URL).rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._poll_interval = poll_interval
        self._poll_timeout = poll_timeout
        self._poll_retry = poll_retry or DEFAULT_RETRY

    @classmethod
    def from_settings(
        cls,
        settings: ServerSettings,
        *,
        poll_interval: float = 2.0,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        poll_retry: RetryPolicy | None = None,
    ) -> FirecrawlClient:
        key = settings.api_key.get_secret_value() if settings.api_key else None
        return cls(
            key, settings.base_url,
            timeout=settings.http_timeout,
            poll_interval=poll_interval,
            poll_timeout=poll_timeout,
            poll_retry=poll_retry,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> FirecrawlClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    # ─────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, body: JsonDict | None = None) -> JsonDict:
        if body is not None:
            body = {**body, "origin": ORIGIN}
        response = await self._http.request(method, path, json=body)
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            detail = payload.get("error") if isinstance(payload, dict) else None
            detail = detail or response.reason_phrase or "no details"
            if response.status_code == 429:
                message = f"Rate limit exceeded (status code 429). Error: {detail}"
            else:
                message = f"Request failed with status code {response.status_code}. Error: {detail}"
            raise FirecrawlError(message, response.status_code)

        if not isinstance(payload, dict):
            raise FirecrawlError(f"Invalid response from {path}: expected a JSON object", response.status_code)
        if payload.get("success") is False:
            raise FirecrawlError(str(payload.get("error") or f"{path} failed"), response.status_code)
        return payload

    async def _start_job(self, path: str, body: JsonDict) -> str:
        """POST ``body`` to ``path`` and return the remote job id."""
        started = await self._request("POST", path, body)
        job_id = started.get("id")
        if not job_id:
            raise FirecrawlError(f"Response from {path} carried no job id")
        return str(job_id)

    async def _poll(self, path: str, *, timeout: float | None = None) -> JsonDict:
        """GET ``path`` until the job reaches a terminal state or the deadline passes.

        Each GET goes through the poll retry policy, so a rate-limited status
        check is repeated without touching the job itself.
        """
        timeout = timeout or self._poll_timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            status = await execute_with_retry(
                lambda: self._request("GET", path), f"status check {path}", self._poll_retry,
            )
            state = status.get("status")
            if state in _TERMINAL_JOB_STATES:
                if state != "completed":
                    raise FirecrawlError(str(status.get("error") or f"Job {state}"))
                return status
            if loop.time() >= deadline:
                raise FirecrawlError(f"Timed out waiting for {path} after {timeout:g}s")
            await asyncio.sleep(self._poll_interval)

    # ─────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────

    async def scrape_url(self, url: str, **options: Any) -> JsonDict:
        """Scrape one page; returns the document (markdown, html, links, ...)."""
        payload = await self._request("POST", "/v1/scrape", {"url": url, **options})
        data = payload.get("data")
        if not isinstance(data, dict):
            raise FirecrawlError("Scrape response carried no document")
        if warning := payload.get("warning"):
            data.setdefault("warning", warning)
        return data

    async def map_url(self, url: str, **options: Any) -> list[str]:
        payload = await self._request("POST", "/v1/map", {"url": url, **options})
        links = payload.get("links")
        if not isinstance(links, list):
            raise FirecrawlError("No links received from Firecrawl API")
        return links

    async def async_crawl_url(self, url: str, **options: Any) -> JsonDict:
        """Start a crawl job; returns ``{"success": True, "id": ..., "url": ...}``."""
        return await self._request("POST", "/v1/crawl", {"url": url, **options})

    async def check_crawl_status(self, crawl_id: str) -> JsonDict:
        return await self._request("GET", f"/v1/crawl/{crawl_id}")

    async def search(self, query: str, **options: Any) -> list[JsonDict]:
        payload = await self._request("POST", "/v1/search", {"query": query, **options})
        data = payload.get("data")
        if not isinstance(data, list):
            raise FirecrawlError("Search response carried no results")
        return data

    async def start_extract(self, urls: Sequence[str], **options: Any) -> JsonDict:
        """Submit an extraction.

        The API either answers with the result (``data``) or with a job ``id``
        to pass to wait_extract().
        """
        body = {"urls": list(urls), **{k: v for k, v in options.items() if v is not None}}
        return await self._request("POST", "/v1/extract", body)

    async def wait_extract(self, job_id: str) -> JsonDict:
        return await self._poll(f"/v1/extract/{job_id}")

    async def start_batch_scrape(self, urls: Sequence[str], options: Mapping[str, Any] | None = None) -> str:
        """Start a remote batch scrape of ``urls``; returns the remote job id.

        ``options`` (including ``timeout``) are sent to the API unchanged.
        """
        job_id = await self._start_job("/v1/batch/scrape", {"urls": list(urls), **(options or {})})
        logger.debug("Remote batch %s started for %d urls", job_id, len(urls))
        return job_id

    async def wait_batch_scrape(self, job_id: str, *, timeout: float | None = None) -> JsonDict:
        """Final batch status payload (``status``, ``completed``, ``total``, ``creditsUsed``, ``data``)."""
        return await self._poll(f"/v1/batch/scrape/{job_id}", timeout=timeout)

    async def start_deep_research(self, query: str, **options: Any) -> str:
        body = {"query": query, **{k: v for k, v in options.items() if v is not None}}
        return await self._start_job("/v1/deep-research", body)

    async def wait_deep_research(self, job_id: str, *, timeout: float | None = None) -> JsonDict:
        """Final research payload; ``data`` holds ``finalAnalysis``, ``activities`` and ``sources``."""
        return await self._poll(f"/v1/deep-research/{job_id}", timeout=timeout)

    async def start_llmstxt(self, url: str, **options: Any) -> str:
        body = {"url": url, **{k: v for k, v in options.items() if v is not None}}
        return await self._start_job("/v1/llmstxt", body)

    async def wait_llmstxt(self, job_id: str) -> JsonDict:
        """Final generation payload; ``data`` holds ``llmstxt`` and optionally ``llmsfulltxt``."""
        return await self._poll(f"/v1/llmstxt/{job_id}")
