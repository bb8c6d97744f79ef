"""MCP transport for crawlcase tools."""

from .bridge import get_tool_schema, tool_to_handler
from .server import MCPServer, ToolServer, Transport, render_result

__all__ = ["MCPServer", "ToolServer", "Transport", "render_result", "tool_to_handler", "get_tool_schema"]
