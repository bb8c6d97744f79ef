"""Core tool abstractions: BaseTool and ToolMetadata.

A tool is a subclass of BaseTool with a typed parameter schema and an async
``_run_result`` that returns a ToolResult. Callers go through ``arun_result``,
which validates raw arguments first; invalid arguments never reach the tool.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crawlcase.foundation.errors import (
    ErrorCode,
    ToolResult,
    exception_result,
    ok_result,
    tool_result,
)

logger = logging.getLogger("crawlcase.tools")


class ToolMetadata(BaseModel):
    """Metadata describing a tool.

    Attributes:
        name: Unique identifier (snake_case, e.g., "firecrawl_scrape")
        description: What the tool does (shown to the client for selection)
        category: Grouping category (e.g., "scrape", "batch")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="general")


TParams = TypeVar("TParams", bound=BaseModel)


def format_validation_error(exc: ValidationError, *, tool_name: str) -> str:
    """Render a pydantic ValidationError as one readable line per field."""
    issues = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "arguments"
        issues.append(f"{loc}: {err['msg']}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(issues)


def trim_response_text(text: str) -> str:
    """Strip surrounding whitespace; clients reject content ending in whitespace."""
    return text.strip()


class BaseTool(ABC, Generic[TParams]):
    """Abstract base class for all tools.

    Subclasses define ``metadata`` and ``params_schema`` and implement
    ``_run_result``.

    Example:
        >>> class MapParams(BaseModel):
        ...     url: str
        ...
        >>> class MapTool(BaseTool[MapParams]):
        ...     metadata = ToolMetadata(name="firecrawl_map", description="Discover URLs on a site")
        ...     params_schema = MapParams
        ...
        ...     async def _run_result(self, params: MapParams) -> ToolResult:
        ...         return self._ok("\\n".join(await client.map_url(params.url)))
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[BaseModel]]

    # ─────────────────────────────────────────────────────────────────
    # Result Helpers
    # ─────────────────────────────────────────────────────────────────

    def _ok(self, value: str) -> ToolResult:
        return ok_result(trim_response_text(value))

    def _err(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        *,
        recoverable: bool = True,
    ) -> ToolResult:
        return tool_result(self.metadata.name, trim_response_text(message), code=code, recoverable=recoverable)

    def _err_from_exc(self, exc: Exception) -> ToolResult:
        return exception_result(self.metadata.name, exc)

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    def validate(self, params: Mapping[str, Any] | BaseModel) -> TParams:
        """Coerce raw arguments to ``params_schema``. Raises pydantic ValidationError."""
        if isinstance(params, self.params_schema):
            return params  # type: ignore[return-value]
        if isinstance(params, BaseModel):
            params = params.model_dump()
        return self.params_schema.model_validate(params)  # type: ignore[return-value]

    @abstractmethod
    async def _run_result(self, params: TParams) -> ToolResult:
        """Execute the tool. Return Ok(text) or Err(trace); may raise."""
        ...

    async def arun_result(self, params: Mapping[str, Any] | BaseModel) -> ToolResult:
        """Validate, then run. Never raises for tool-level failures."""
        name = self.metadata.name
        try:
            validated = self.validate(params)
        except ValidationError as e:
            return self._err(format_validation_error(e, tool_name=name), ErrorCode.INVALID_PARAMS, recoverable=False)

        start = time.perf_counter()
        logger.info("Received request for tool: %s", name)
        try:
            result = await self._run_result(validated)
        except Exception as e:
            logger.error("Request failed: %s", e, extra={"tool": name})
            result = self._err_from_exc(e)
        logger.info("Request completed in %.0fms", (time.perf_counter() - start) * 1000, extra={"tool": name})
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.metadata.name!r})"
