"""Batch scrape tools: queue many URLs as one job, check on the job later.

Submission only creates the job and queues it; the work happens on the
scheduler. Failures of queued jobs surface only through the status check.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import orjson
from pydantic import Field

from crawlcase.foundation.errors import ErrorCode, JsonDict, ToolResult

from ..base import BaseTool, ToolMetadata
from .common import FirecrawlParams, format_results

if TYPE_CHECKING:
    from crawlcase.runtime.batch import BatchOperations

logger = logging.getLogger("crawlcase.tools.batch")


class BatchScrapeParams(FirecrawlParams):
    """Parameters for a batch scrape submission."""

    urls: list[str] = Field(..., min_length=1, description="List of URLs to scrape")
    options: dict[str, Any] | None = Field(
        default=None,
        description="Scrape options applied to every URL (formats, onlyMainContent, waitFor, ...)",
    )


class BatchStatusParams(FirecrawlParams):
    id: str = Field(..., min_length=1, description="Batch job ID to check")


class BatchScrapeTool(BaseTool[BatchScrapeParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_batch_scrape",
        description=(
            "Scrape multiple URLs efficiently with rate limiting. Queues the batch and returns "
            "a job ID at once; use firecrawl_check_batch_status to check progress."
        ),
        category="batch",
    )
    params_schema: ClassVar[type[BatchScrapeParams]] = BatchScrapeParams

    def __init__(self, operations: BatchOperations) -> None:
        self.operations = operations

    async def _run_result(self, params: BatchScrapeParams) -> ToolResult:
        job = self.operations.submit(params.urls, params.options)
        logger.info("Queued batch %s with %d urls", job["id"], len(params.urls))
        return self._ok(
            f"Batch operation queued with ID: {job['id']}. "
            "Use firecrawl_check_batch_status to check progress."
        )


def _render_result(result: Any) -> str:
    documents = result.get("data") if isinstance(result, dict) else None
    if isinstance(documents, list) and documents:
        return format_results(documents)
    return orjson.dumps(result, default=str, option=orjson.OPT_INDENT_2).decode()


def render_status(status: JsonDict) -> str:
    """Human-readable view of a job status dict."""
    progress = status["progress"]
    lines = [
        f"Batch Status: {status['id']}",
        f"Status: {status['status']}",
        f"Progress: {progress['completed']}/{progress['total']}",
    ]
    if "error" in status:
        lines.append(f"Error: {status['error']}")
    if "result" in status:
        lines.append(f"\nResults:\n{_render_result(status['result'])}")
    return "\n".join(lines)


class BatchStatusTool(BaseTool[BatchStatusParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_check_batch_status",
        description="Check the status of a batch scrape job. Returns status, progress, and results or error.",
        category="batch",
    )
    params_schema: ClassVar[type[BatchStatusParams]] = BatchStatusParams

    def __init__(self, operations: BatchOperations) -> None:
        self.operations = operations

    async def _run_result(self, params: BatchStatusParams) -> ToolResult:
        status = self.operations.status(params.id)
        if status is None:
            return self._err(f"No batch operation found with ID: {params.id}", ErrorCode.NOT_FOUND, recoverable=False)
        return self._ok(render_status(status))
