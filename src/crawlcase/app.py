"""Application wiring: settings -> client, batch operations, tools, server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from crawlcase.ext.mcp import MCPServer
from crawlcase.foundation.config import CrawlcaseSettings, get_settings
from crawlcase.foundation.errors import ConfigurationError
from crawlcase.io import FirecrawlClient
from crawlcase.runtime.batch import BatchOperations, JobRecord, JobRunner, JobWaiter
from crawlcase.runtime.retry import RetryPolicy
from crawlcase.tools.firecrawl import build_registry

SERVER_NAME = "firecrawl-mcp"

logger = logging.getLogger("crawlcase.app")


@dataclass(slots=True)
class App:
    settings: CrawlcaseSettings
    client: FirecrawlClient
    batch: BatchOperations
    server: MCPServer


def check_settings(settings: CrawlcaseSettings) -> None:
    """Refuse to start against the cloud API without a key."""
    server = settings.server
    if server.api_key is None and server.api_url is None:
        raise ConfigurationError("Either FIRECRAWL_API_KEY or FIRECRAWL_API_URL must be provided")


def remote_batch_steps(client: FirecrawlClient) -> tuple[JobRunner, JobWaiter]:
    """Runner and waiter driving a remote Firecrawl batch scrape for one job.

    The runner only submits the batch and is the step the scheduler retries;
    the waiter polls the submitted batch to its final status.
    """

    async def start(record: JobRecord) -> str:
        return await client.start_batch_scrape(record.inputs, record.options)

    async def wait(record: JobRecord, remote_id: Any) -> Any:
        return await client.wait_batch_scrape(remote_id)

    return start, wait


def create_app(settings: CrawlcaseSettings | None = None, *, client: FirecrawlClient | None = None) -> App:
    settings = settings or get_settings()
    check_settings(settings)
    retry_policy = RetryPolicy.from_settings(settings.retry)
    client = client or FirecrawlClient.from_settings(
        settings.server,
        poll_interval=settings.batch.poll_interval,
        poll_timeout=settings.batch.poll_timeout,
        poll_retry=retry_policy,
    )
    runner, waiter = remote_batch_steps(client)
    batch = BatchOperations.from_settings(runner, settings, waiter=waiter)
    registry = build_registry(
        client, batch,
        retry_policy=retry_policy,
        self_hosted=settings.server.is_self_hosted,
    )
    logger.info("Configuration: API URL: %s", settings.server.api_url or "default")
    return App(settings, client, batch, MCPServer(SERVER_NAME, registry))
