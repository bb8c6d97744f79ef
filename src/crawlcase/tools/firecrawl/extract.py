"""LLM-backed structured extraction from one or more pages."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, ClassVar

import orjson
from pydantic import Field

from crawlcase.foundation.errors import ErrorCode, ToolResult
from crawlcase.runtime.retry import RetryPolicy, execute_with_retry

from ..base import ToolMetadata
from .common import FirecrawlParams, FirecrawlTool

if TYPE_CHECKING:
    from crawlcase.io import FirecrawlClient

logger = logging.getLogger("crawlcase.tools.extract")

NOT_SUPPORTED_MESSAGE = (
    "Extraction is not supported by this self-hosted instance. Please ensure LLM support is configured."
)


class ExtractParams(FirecrawlParams):
    """Parameters for structured extraction."""

    urls: list[str] = Field(..., min_length=1, description="List of URLs to extract information from")
    prompt: str | None = Field(default=None, description="Prompt for the LLM extraction")
    system_prompt: str | None = Field(default=None, description="System prompt for LLM extraction")
    schema_: dict[str, Any] | None = Field(default=None, alias="schema", description="JSON schema for structured data extraction")
    allow_external_links: bool | None = Field(default=None, description="Allow extraction from external links")
    enable_web_search: bool | None = Field(default=None, description="Enable web search for additional context")
    include_subdomains: bool | None = Field(default=None, description="Include subdomains in extraction")


class ExtractTool(FirecrawlTool[ExtractParams]):
    """Extraction tool. ``self_hosted`` turns "not supported" failures into a configuration hint."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="firecrawl_extract",
        description=(
            "Extract structured information from web pages using LLM capabilities. Supports a prompt, "
            "a system prompt and a JSON schema. Returns the extracted data as JSON."
        ),
        category="extract",
    )
    params_schema: ClassVar[type[ExtractParams]] = ExtractParams

    def __init__(
        self,
        client: FirecrawlClient,
        *,
        retry_policy: RetryPolicy | None = None,
        self_hosted: bool = False,
    ) -> None:
        super().__init__(client, retry_policy=retry_policy)
        self.self_hosted = self_hosted

    async def _run_result(self, params: ExtractParams) -> ToolResult:
        logger.info("Starting extraction for URLs: %s", ", ".join(params.urls))
        if self.self_hosted:
            logger.info("Using self-hosted instance for extraction")
        options = params.api_options(exclude={"urls"})
        start = time.perf_counter()
        try:
            response = await execute_with_retry(
                lambda: self.client.start_extract(params.urls, **options),
                "extract operation",
                self.retry_policy,
            )
            if "data" not in response and (job_id := response.get("id")):
                response = await self.client.wait_extract(job_id)
        except Exception as e:
            if self.self_hosted and "not supported" in str(e).lower():
                logger.error("Extraction is not supported by this self-hosted instance")
                return self._err(NOT_SUPPORTED_MESSAGE, ErrorCode.NOT_SUPPORTED, recoverable=False)
            return self._err_from_exc(e)

        logger.info("Extraction completed in %.0fms", (time.perf_counter() - start) * 1000)
        if warning := response.get("warning"):
            logger.warning("%s", warning)
        return self._ok(orjson.dumps(response.get("data"), option=orjson.OPT_INDENT_2).decode())
