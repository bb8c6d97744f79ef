"""Asynchronous site crawl: start a remote crawl job, check on it later."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from crawlcase.foundation.errors import ErrorCode, ToolResult
from crawlcase.runtime.retry import execute_with_retry

from ..base import ToolMetadata
from .common import FirecrawlParams, FirecrawlTool, ScrapeFormat, format_results


class PageScrapeOptions(FirecrawlParams):
    formats: list[ScrapeFormat] | None = None
    only_main_content: bool | None = None
    include_tags: list[str] | None = None
    exclude_tags: list[str] | None = None
    wait_for: int | None = Field(default=None, ge=0)


class CrawlParams(FirecrawlParams):
    """Parameters for starting a crawl."""

    url: str = Field(..., description="Starting URL for the crawl")
    exclude_paths: list[str] | None = Field(default=None, description="URL paths to exclude from crawling")
    include_paths: list[str] | None = Field(default=None, description="Only crawl these URL paths")
    max_depth: int | None = Field(default=None, ge=0, description="Maximum link depth to crawl")
    ignore_sitemap: bool | None = Field(default=None, description="Skip sitemap.xml discovery")
    limit: int | None = Field(default=None, ge=1, description="Maximum number of pages to crawl")
    allow_backward_links: bool | None = Field(default=None, description="Allow crawling links that point to parent directories")
    allow_external_links: bool | None = Field(default=None, description="Allow crawling links to external domains")
    webhook: str | dict[str, Any] | None = Field(default=None, description="Webhook URL, or {url, headers}, notified when the crawl completes")
    deduplicate_similar_urls: bool | None = Field(default=None, alias="deduplicateSimilarURLs", description="Remove similar URLs during crawl")
    ignore_query_parameters: bool | None = Field(default=None, description="Ignore query parameters when comparing URLs")
    scrape_options: PageScrapeOptions | None = Field(default=None, description="Options for scraping each page")


class CrawlTool(FirecrawlTool[CrawlParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_crawl",
        description=(
            "Start an asynchronous crawl job on a website and extract content from all pages. "
            "Returns a job ID; use firecrawl_check_crawl_status to check progress. Keep depth and "
            "limit small, crawl responses can be very large."
        ),
        category="crawl",
    )
    params_schema: ClassVar[type[CrawlParams]] = CrawlParams

    async def _run_result(self, params: CrawlParams) -> ToolResult:
        options = params.api_options(exclude={"url"})
        response = await execute_with_retry(
            lambda: self.client.async_crawl_url(params.url, **options),
            "crawl operation",
            self.retry_policy,
        )
        if not (job_id := response.get("id")):
            return self._err("Crawl response carried no job id", ErrorCode.EXTERNAL_SERVICE_ERROR, recoverable=False)
        return self._ok(
            f"Started crawl for {params.url} with job ID: {job_id}. "
            "Use firecrawl_check_crawl_status to check progress."
        )


class CrawlStatusParams(FirecrawlParams):
    id: str = Field(..., min_length=1, description="Crawl job ID to check")


class CrawlStatusTool(FirecrawlTool[CrawlStatusParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_check_crawl_status",
        description="Check the status of a crawl job. Returns status and progress, including results if available.",
        category="crawl",
    )
    params_schema: ClassVar[type[CrawlStatusParams]] = CrawlStatusParams

    async def _run_result(self, params: CrawlStatusParams) -> ToolResult:
        status = await self.client.check_crawl_status(params.id)
        lines = [
            "Crawl Status:",
            f"Status: {status.get('status')}",
            f"Progress: {status.get('completed', 0)}/{status.get('total', 0)}",
            f"Credits Used: {status.get('creditsUsed', 0)}",
            f"Expires At: {status.get('expiresAt')}",
        ]
        if data := status.get("data"):
            lines.append(f"\nResults:\n{format_results(data)}")
        return self._ok("\n".join(lines))
