"""MCP server for the crawlcase tool registry.

``ToolServer.invoke`` is the transport-independent dispatch path: look the tool
up by name, validate, run, and return a ToolResult. ``MCPServer`` puts the same
registry behind FastMCP on the stdio or SSE transport.

Example - stdio (Claude Desktop, Cursor):
    >>> MCPServer("firecrawl-mcp", registry).run()

Example - local SSE:
    >>> MCPServer("firecrawl-mcp", registry).run(transport="sse", host="127.0.0.1", port=3000)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError as MCPToolError

from crawlcase.foundation.errors import ErrorCode, ToolResult, tool_result

from .bridge import get_tool_schema, tool_to_handler

if TYPE_CHECKING:
    from crawlcase.tools import ToolRegistry

Transport = Literal["stdio", "sse"]

logger = logging.getLogger("crawlcase.server")


def render_result(result: ToolResult) -> str:
    """Ok text as-is; Err raised as an MCP tool error carrying the trace message."""
    if result.is_err():
        raise MCPToolError(result.unwrap_err().message)
    return result.unwrap()


class ToolServer:
    """Dispatch over a ToolRegistry, independent of any transport."""

    __slots__ = ("_name", "_registry")

    def __init__(self, name: str, registry: ToolRegistry) -> None:
        self._name = name
        self._registry = registry

    @property
    def name(self) -> str:
        return self._name

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def list_tools(self) -> list[dict[str, object]]:
        """All tools with their argument schemas."""
        return [
            {
                "name": tool.metadata.name,
                "description": tool.metadata.description,
                "inputSchema": get_tool_schema(tool),
            }
            for tool in self._registry
        ]

    async def invoke(self, tool_name: str, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Invoke a tool by name. Never raises for tool failures."""
        tool = self._registry.get(tool_name)
        if tool is None:
            return tool_result(tool_name, f"Unknown tool: {tool_name}", code=ErrorCode.NOT_FOUND, recoverable=False)
        return await tool.arun_result(arguments or {})


class MCPServer(ToolServer):
    """FastMCP-backed server for MCP clients."""

    __slots__ = ("_mcp",)

    def __init__(self, name: str, registry: ToolRegistry) -> None:
        super().__init__(name, registry)
        self._mcp = FastMCP(name)
        for tool in registry:
            self._mcp.tool(name=tool.metadata.name, description=tool.metadata.description)(
                tool_to_handler(tool, render_result)
            )

    def run(
        self,
        transport: Transport = "stdio",
        *,
        host: str = "127.0.0.1",
        port: int = 3000,
    ) -> None:
        """Start the server (blocking).

        Args:
            transport: "stdio" (stdout carries the protocol) or "sse" (HTTP)
            host: Bind address for sse
            port: Port for sse
        """
        logger.info("Firecrawl MCP Server starting", extra={"transport": transport, "tools": len(self._registry)})
        if transport == "stdio":
            self._mcp.run()
        else:
            logger.info("SSE endpoint: http://%s:%d/sse", host, port)
            self._mcp.run(transport=transport, host=host, port=port)

    @property
    def fastmcp(self) -> FastMCP:
        """Access underlying FastMCP instance."""
        return self._mcp
