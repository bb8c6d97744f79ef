"""Remote service I/O."""

from .firecrawl import FirecrawlClient, FirecrawlError

__all__ = ["FirecrawlClient", "FirecrawlError"]
