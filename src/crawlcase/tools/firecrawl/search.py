"""Web search with optional scraping of the results."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import Field

from crawlcase.foundation.errors import JsonDict, ToolResult
from crawlcase.runtime.retry import execute_with_retry

from ..base import ToolMetadata
from .common import FirecrawlParams, FirecrawlTool
from .scrape import LocationParams


class SearchScrapeOptions(FirecrawlParams):
    formats: list[Literal["markdown", "html", "rawHtml"]] | None = Field(default=None, description="Content formats to extract from search results")
    only_main_content: bool | None = Field(default=None, description="Extract only the main content from results")
    wait_for: int | None = Field(default=None, ge=0, description="Time in milliseconds to wait for dynamic content")


class SearchParams(FirecrawlParams):
    """Parameters for web search."""

    query: str = Field(..., min_length=1, description="Search query string")
    limit: int | None = Field(default=None, ge=1, description="Maximum number of results to return (default: 5)")
    lang: str | None = Field(default=None, description="Language code for search results (default: en)")
    country: str | None = Field(default=None, description="Country code for search results (default: us)")
    tbs: str | None = Field(default=None, description="Time-based search filter")
    filter: str | None = Field(default=None, description="Search filter")
    location: LocationParams | None = Field(default=None, description="Location settings for search")
    scrape_options: SearchScrapeOptions | None = Field(default=None, description="Options for scraping search results")


def _render_result(result: JsonDict) -> str:
    text = (
        f"URL: {result.get('url')}\n"
        f"Title: {result.get('title') or 'No title'}\n"
        f"Description: {result.get('description') or 'No description'}"
    )
    if markdown := result.get("markdown"):
        text += f"\n\nContent:\n{markdown}"
    return text


class SearchTool(FirecrawlTool[SearchParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_search",
        description=(
            "Search the web and optionally extract content from search results. Best for finding "
            "information when you don't know which website has it."
        ),
        category="search",
    )
    params_schema: ClassVar[type[SearchParams]] = SearchParams

    async def _run_result(self, params: SearchParams) -> ToolResult:
        options = params.api_options(exclude={"query"})
        results = await execute_with_retry(
            lambda: self.client.search(params.query, **options),
            "search operation",
            self.retry_policy,
        )
        return self._ok("\n\n".join(_render_result(r) for r in results))
