"""Single-page tools: scrape one URL, map a site's URLs."""

from __future__ import annotations

import logging
import time
from typing import Any, ClassVar

import orjson
from pydantic import Field

from crawlcase.foundation.errors import JsonDict, ToolResult

from ..base import ToolMetadata
from .common import FirecrawlParams, FirecrawlTool, ScrapeFormat

logger = logging.getLogger("crawlcase.tools.scrape")


class LocationParams(FirecrawlParams):
    country: str | None = Field(default=None, description="Country code for geolocation")
    languages: list[str] | None = Field(default=None, description="Language codes for content")


class ExtractOptions(FirecrawlParams):
    schema_: dict[str, Any] | None = Field(default=None, alias="schema", description="Schema for structured data extraction")
    system_prompt: str | None = Field(default=None, description="System prompt for LLM extraction")
    prompt: str | None = Field(default=None, description="User prompt for LLM extraction")


class ScrapeParams(FirecrawlParams):
    """Parameters for scraping a single page."""

    url: str = Field(..., description="The URL to scrape")
    formats: list[ScrapeFormat] = Field(default_factory=lambda: ["markdown"], description="Content formats to extract")
    only_main_content: bool | None = Field(default=None, description="Extract only the main content, filtering out navigation, footers, etc.")
    include_tags: list[str] | None = Field(default=None, description="HTML tags to specifically include in extraction")
    exclude_tags: list[str] | None = Field(default=None, description="HTML tags to exclude from extraction")
    wait_for: int | None = Field(default=None, ge=0, description="Time in milliseconds to wait for dynamic content to load")
    timeout: int | None = Field(default=None, gt=0, description="Maximum time in milliseconds to wait for the page to load")
    actions: list[dict[str, Any]] | None = Field(default=None, description="List of actions to perform before scraping")
    extract: ExtractOptions | None = Field(default=None, description="Configuration for structured data extraction")
    mobile: bool | None = Field(default=None, description="Use mobile viewport")
    skip_tls_verification: bool | None = Field(default=None, description="Skip TLS certificate verification")
    remove_base64_images: bool | None = Field(default=None, description="Remove base64 encoded images from output")
    location: LocationParams | None = Field(default=None, description="Location settings for scraping")


def _render_document(doc: JsonDict, formats: list[str]) -> str:
    """Requested formats present in ``doc``, in a fixed order, blank-line separated."""
    parts: list[str] = []
    for fmt in ("markdown", "html", "rawHtml"):
        if fmt in formats and doc.get(fmt):
            parts.append(doc[fmt])
    if "links" in formats and doc.get("links"):
        parts.append("\n".join(doc["links"]))
    if "screenshot" in formats and doc.get("screenshot"):
        parts.append(doc["screenshot"])
    if "extract" in formats and doc.get("extract"):
        parts.append(orjson.dumps(doc["extract"], option=orjson.OPT_INDENT_2).decode())
    return "\n\n".join(parts) or "No content available"


class ScrapeTool(FirecrawlTool[ScrapeParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_scrape",
        description=(
            "Scrape content from a single URL with advanced options. Best for single page content "
            "extraction when you know exactly which page holds the information. Returns markdown, "
            "HTML, or other formats as specified."
        ),
        category="scrape",
    )
    params_schema: ClassVar[type[ScrapeParams]] = ScrapeParams

    async def _run_result(self, params: ScrapeParams) -> ToolResult:
        options = params.api_options(exclude={"url"})
        logger.info("Starting scrape for URL: %s", params.url, extra={"options": options})
        start = time.perf_counter()
        doc = await self.client.scrape_url(params.url, **options)
        logger.info("Scrape completed in %.0fms", (time.perf_counter() - start) * 1000)
        if warning := doc.get("warning"):
            logger.warning("%s", warning)
        return self._ok(_render_document(doc, list(params.formats)))


class MapParams(FirecrawlParams):
    """Parameters for URL discovery."""

    url: str = Field(..., description="Starting URL for URL discovery")
    search: str | None = Field(default=None, description="Optional search term to filter URLs")
    ignore_sitemap: bool | None = Field(default=None, description="Skip sitemap.xml discovery and only use HTML links")
    sitemap_only: bool | None = Field(default=None, description="Only use sitemap.xml for discovery, ignore HTML links")
    include_subdomains: bool | None = Field(default=None, description="Include URLs from subdomains in results")
    limit: int | None = Field(default=None, ge=1, description="Maximum number of URLs to return")


class MapTool(FirecrawlTool[MapParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_map",
        description=(
            "Map a website to discover all indexed URLs on the site. Best for discovering URLs "
            "before deciding what to scrape. Returns one URL per line."
        ),
        category="scrape",
    )
    params_schema: ClassVar[type[MapParams]] = MapParams

    async def _run_result(self, params: MapParams) -> ToolResult:
        links = await self.client.map_url(params.url, **params.api_options(exclude={"url"}))
        return self._ok("\n".join(links))
