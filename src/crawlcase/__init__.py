"""crawlcase - Firecrawl tools for MCP clients.

Exposes Firecrawl scraping, crawling, search and extraction as MCP tools,
plus a queued batch scrape with rate-limit aware retries and credit usage
warnings.

Quick Start:
    $ FIRECRAWL_API_KEY=fc-... crawlcase            # stdio transport
    $ SSE_LOCAL=true PORT=3000 crawlcase            # local SSE transport

Programmatic:
    >>> from crawlcase import create_app
    >>> app = create_app()
    >>> result = await app.server.invoke("firecrawl_batch_scrape", {"urls": ["https://a.test"]})
    >>> result.unwrap()
    'Batch operation queued with ID: batch_1. Use firecrawl_check_batch_status to check progress.'

Batch orchestration on its own:
    >>> from crawlcase.runtime.batch import BatchOperations
    >>> ops = BatchOperations(runner)
    >>> ops.submit(["https://a.test"])
    {'id': 'batch_1'}
"""

from .app import App, create_app
from .ext.mcp import MCPServer, ToolServer
from .foundation.config import CrawlcaseSettings, get_settings
from .foundation.errors import ErrorCode, Err, Ok, Result, ToolError, ToolResult
from .io import FirecrawlClient, FirecrawlError
from .runtime.batch import BatchOperations, JobStatus
from .runtime.retry import RetryPolicy, execute_with_retry
from .runtime.usage import UsageMonitor
from .tools import BaseTool, ToolMetadata, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "App", "create_app",
    "MCPServer", "ToolServer",
    "CrawlcaseSettings", "get_settings",
    "ErrorCode", "ToolError", "Result", "Ok", "Err", "ToolResult",
    "FirecrawlClient", "FirecrawlError",
    "BatchOperations", "JobStatus",
    "RetryPolicy", "execute_with_retry",
    "UsageMonitor",
    "BaseTool", "ToolMetadata", "ToolRegistry",
]
