"""Tests for the MCP bridge, FastMCP server and application wiring."""

from __future__ import annotations

import inspect

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError as MCPToolError

from crawlcase.app import SERVER_NAME, check_settings, create_app, remote_batch_steps
from crawlcase.ext.mcp import MCPServer, render_result, tool_to_handler
from crawlcase.foundation.config import CrawlcaseSettings, ServerSettings
from crawlcase.foundation.errors import ConfigurationError, ErrorCode, Ok, tool_result
from crawlcase.runtime.batch import BatchOperations
from crawlcase.runtime.retry import ConstantBackoff, RetryPolicy
from crawlcase.tools.firecrawl import MapTool, ScrapeTool, build_registry

NO_WAIT = RetryPolicy(max_attempts=3, backoff=ConstantBackoff(0))


@pytest.fixture
def mcp_server(fake_client) -> MCPServer:
    ops = BatchOperations(*remote_batch_steps(fake_client), retry_policy=NO_WAIT)
    return MCPServer(SERVER_NAME, build_registry(fake_client, ops, retry_policy=NO_WAIT))


# ─────────────────────────────────────────────────────────────────────────────
# Bridge
# ─────────────────────────────────────────────────────────────────────────────


def test_handler_signature_uses_wire_names(fake_client) -> None:
    handler = tool_to_handler(ScrapeTool(fake_client), render_result)
    sig = inspect.signature(handler)

    assert handler.__name__ == "firecrawl_scrape"
    assert "onlyMainContent" in sig.parameters
    assert "only_main_content" not in sig.parameters
    assert sig.parameters["url"].default is inspect.Parameter.empty
    assert sig.parameters["formats"].default == ["markdown"]
    assert sig.parameters["waitFor"].default is None
    assert all(p.kind is inspect.Parameter.KEYWORD_ONLY for p in sig.parameters.values())


@pytest.mark.asyncio
async def test_handler_returns_text(fake_client) -> None:
    handler = tool_to_handler(MapTool(fake_client), render_result)
    assert await handler(url="https://example.com") == "https://example.com\nhttps://example.com/about"


def test_render_result() -> None:
    assert render_result(Ok("done")) == "done"
    with pytest.raises(MCPToolError, match="No batch operation found"):
        render_result(tool_result("firecrawl_check_batch_status", "No batch operation found with ID: x", code=ErrorCode.NOT_FOUND))


# ─────────────────────────────────────────────────────────────────────────────
# FastMCP server (in-memory client)
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fastmcp_lists_tools_with_wire_schema(mcp_server) -> None:
    async with Client(mcp_server.fastmcp) as client:
        tools = {t.name: t for t in await client.list_tools()}

    assert set(tools) == set(mcp_server.registry.names())
    scrape = tools["firecrawl_scrape"]
    assert "onlyMainContent" in scrape.inputSchema["properties"]
    assert "url" in scrape.inputSchema.get("required", [])


@pytest.mark.asyncio
async def test_fastmcp_call_and_error(mcp_server, fake_client) -> None:
    async with Client(mcp_server.fastmcp) as client:
        result = await client.call_tool("firecrawl_map", {"url": "https://example.com", "limit": 5})
        assert result.content[0].text == "https://example.com\nhttps://example.com/about"

        with pytest.raises(MCPToolError, match="No batch operation found with ID: missing"):
            await client.call_tool("firecrawl_check_batch_status", {"id": "missing"})

    assert fake_client.called("map_url") == [(("https://example.com",), {"limit": 5})]


# ─────────────────────────────────────────────────────────────────────────────
# App wiring
# ─────────────────────────────────────────────────────────────────────────────


def test_check_settings_requires_key_or_url(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("FIRECRAWL_API_KEY", raising=False)
    monkeypatch.delenv("FIRECRAWL_API_URL", raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ConfigurationError, match="FIRECRAWL_API_KEY or FIRECRAWL_API_URL"):
        check_settings(CrawlcaseSettings())
    check_settings(CrawlcaseSettings(server=ServerSettings(api_url="http://localhost:3002")))


def test_create_app_wires_registry(fake_client) -> None:
    settings = CrawlcaseSettings(server=ServerSettings(api_key="fc-test"))
    app = create_app(settings, client=fake_client)

    assert app.client is fake_client
    assert app.server.name == SERVER_NAME
    assert "firecrawl_batch_scrape" in app.server.registry
    assert len(app.server.registry) == 10
    assert "firecrawl_deep_research" in app.server.registry
