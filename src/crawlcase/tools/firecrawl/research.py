"""Long-running LLM jobs: deep research on a query, LLMs.txt generation for a site.

Both start a remote job and wait for it; the wait polls the job's status and
never re-submits it.
"""

from __future__ import annotations

import logging
import time
from typing import ClassVar

from pydantic import Field

from crawlcase.foundation.errors import ErrorCode, JsonDict, ToolResult
from crawlcase.runtime.retry import execute_with_retry

from ..base import ToolMetadata
from .common import FirecrawlParams, FirecrawlTool

logger = logging.getLogger("crawlcase.tools.research")

# Extra seconds allowed past the research time limit before giving up on the job
RESEARCH_GRACE_SECONDS = 60


class DeepResearchParams(FirecrawlParams):
    """Parameters for a deep research session."""

    query: str = Field(..., min_length=1, description="The query to research")
    max_depth: int | None = Field(default=None, ge=1, le=10, description="Maximum depth of research iterations (1-10)")
    time_limit: int | None = Field(default=None, ge=30, le=300, description="Time limit in seconds (30-300)")
    max_urls: int | None = Field(default=None, ge=1, le=1000, description="Maximum number of URLs to analyze (1-1000)")


def _log_research_trail(data: JsonDict) -> None:
    for activity in data.get("activities") or []:
        logger.info("Research activity: %s (Depth: %s)", activity.get("message"), activity.get("depth"))
    for source in data.get("sources") or []:
        title = f" - {source['title']}" if source.get("title") else ""
        logger.info("Research source found: %s%s", source.get("url"), title)


class DeepResearchTool(FirecrawlTool[DeepResearchParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_deep_research",
        description=(
            "Conduct deep web research on a query using intelligent crawling, search, and LLM analysis. "
            "Best for complex research questions requiring multiple sources. Returns the final "
            "analysis generated from the research."
        ),
        category="research",
    )
    params_schema: ClassVar[type[DeepResearchParams]] = DeepResearchParams

    async def _run_result(self, params: DeepResearchParams) -> ToolResult:
        logger.info("Starting deep research for query: %s", params.query)
        start = time.perf_counter()
        job_id = await self.client.start_deep_research(params.query, **params.api_options(exclude={"query"}))
        timeout = params.time_limit + RESEARCH_GRACE_SECONDS if params.time_limit else None
        response = await self.client.wait_deep_research(job_id, timeout=timeout)
        logger.info("Deep research completed in %.0fms", (time.perf_counter() - start) * 1000)

        data = response.get("data") or {}
        _log_research_trail(data)
        if not (analysis := data.get("finalAnalysis")):
            return self._err("Deep research returned no final analysis", ErrorCode.EXTERNAL_SERVICE_ERROR)
        return self._ok(analysis)


class GenerateLLMsTxtParams(FirecrawlParams):
    """Parameters for LLMs.txt generation."""

    url: str = Field(..., description="The URL to generate LLMs.txt from")
    max_urls: int | None = Field(default=None, ge=1, le=100, description="Maximum number of URLs to process (1-100, default: 10)")
    show_full_text: bool | None = Field(default=None, description="Whether to show the full LLMs-full.txt in the response")


class GenerateLLMsTxtTool(FirecrawlTool[GenerateLLMsTxtParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_generate_llmstxt",
        description=(
            "Generate a standardized llms.txt (and optionally llms-full.txt) file for a given domain. "
            "This file defines how large language models should interact with the site."
        ),
        category="research",
    )
    params_schema: ClassVar[type[GenerateLLMsTxtParams]] = GenerateLLMsTxtParams

    async def _run_result(self, params: GenerateLLMsTxtParams) -> ToolResult:
        logger.info("Starting LLMs.txt generation for URL: %s", params.url)
        start = time.perf_counter()
        options = params.api_options(exclude={"url"})
        job_id = await execute_with_retry(
            lambda: self.client.start_llmstxt(params.url, **options),
            "LLMs.txt generation",
            self.retry_policy,
        )
        response = await self.client.wait_llmstxt(job_id)
        logger.info("LLMs.txt generation completed in %.0fms", (time.perf_counter() - start) * 1000)

        data = response.get("data") or {}
        if not data.get("llmstxt"):
            return self._err("LLMs.txt generation returned no content", ErrorCode.EXTERNAL_SERVICE_ERROR)
        text = f"LLMs.txt content:\n\n{data['llmstxt']}"
        if params.show_full_text and data.get("llmsfulltxt"):
            text += f"\n\nLLMs-full.txt content:\n\n{data['llmsfulltxt']}"
        return self._ok(text)
