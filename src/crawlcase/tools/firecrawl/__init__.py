"""Firecrawl tools exposed to MCP clients.

Example:
    >>> registry = build_registry(client, BatchOperations(runner))
    >>> registry.names()
    ['firecrawl_scrape', 'firecrawl_map', ..., 'firecrawl_generate_llmstxt']
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..registry import ToolRegistry
from .batch import BatchScrapeParams, BatchScrapeTool, BatchStatusParams, BatchStatusTool, render_status
from .common import FirecrawlParams, FirecrawlTool, format_results
from .crawl import CrawlParams, CrawlStatusParams, CrawlStatusTool, CrawlTool
from .extract import ExtractParams, ExtractTool
from .research import DeepResearchParams, DeepResearchTool, GenerateLLMsTxtParams, GenerateLLMsTxtTool
from .scrape import MapParams, MapTool, ScrapeParams, ScrapeTool
from .search import SearchParams, SearchTool

if TYPE_CHECKING:
    from crawlcase.io import FirecrawlClient
    from crawlcase.runtime.batch import BatchOperations
    from crawlcase.runtime.retry import RetryPolicy


def build_registry(
    client: FirecrawlClient,
    operations: BatchOperations,
    *,
    retry_policy: RetryPolicy | None = None,
    self_hosted: bool = False,
) -> ToolRegistry:
    """Registry holding every Firecrawl tool, in listing order."""
    registry = ToolRegistry()
    for tool in (
        ScrapeTool(client),
        MapTool(client),
        CrawlTool(client, retry_policy=retry_policy),
        CrawlStatusTool(client),
        SearchTool(client, retry_policy=retry_policy),
        ExtractTool(client, retry_policy=retry_policy, self_hosted=self_hosted),
        BatchScrapeTool(operations),
        BatchStatusTool(operations),
        DeepResearchTool(client),
        GenerateLLMsTxtTool(client, retry_policy=retry_policy),
    ):
        registry.register(tool)
    return registry


__all__ = [
    "build_registry",
    "FirecrawlParams", "FirecrawlTool", "format_results",
    "ScrapeTool", "ScrapeParams", "MapTool", "MapParams",
    "CrawlTool", "CrawlParams", "CrawlStatusTool", "CrawlStatusParams",
    "SearchTool", "SearchParams",
    "ExtractTool", "ExtractParams",
    "BatchScrapeTool", "BatchScrapeParams", "BatchStatusTool", "BatchStatusParams", "render_status",
    "DeepResearchTool", "DeepResearchParams", "GenerateLLMsTxtTool", "GenerateLLMsTxtParams",
]
