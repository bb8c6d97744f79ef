"""Shared pieces of the Firecrawl tools: parameter base, tool base, formatting."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from crawlcase.foundation.errors import JsonDict
from crawlcase.runtime.retry import DEFAULT_RETRY, RetryPolicy

from ..base import BaseTool, TParams

if TYPE_CHECKING:
    from crawlcase.io import FirecrawlClient

ScrapeFormat = Literal["markdown", "html", "rawHtml", "screenshot", "links", "screenshot@fullPage", "extract"]

PREVIEW_CHARS = 100


class FirecrawlParams(BaseModel):
    """Tool arguments: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def api_options(self, *, exclude: set[str] | None = None) -> JsonDict:
        """Arguments as remote API options: camelCase keys, unset values dropped."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude=exclude)


class FirecrawlTool(BaseTool[TParams]):
    """Tool backed by the Firecrawl client.

    ``retry_policy`` drives the calls a tool sends through the Backoff Executor.
    """

    def __init__(self, client: FirecrawlClient, *, retry_policy: RetryPolicy | None = None) -> None:
        self.client = client
        self.retry_policy = retry_policy or DEFAULT_RETRY


def format_results(documents: Sequence[JsonDict]) -> str:
    """One block per document: URL, a content preview, and the title when known."""
    blocks = []
    for doc in documents:
        content = doc.get("markdown") or doc.get("html") or doc.get("rawHtml") or "No content"
        preview = content[:PREVIEW_CHARS] + ("..." if len(content) > PREVIEW_CHARS else "")
        lines = [f"URL: {doc.get('url') or 'Unknown URL'}", f"Content: {preview}"]
        if title := (doc.get("metadata") or {}).get("title"):
            lines.append(f"Title: {title}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
