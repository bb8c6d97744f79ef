"""Tool registry: lookup by name for the dispatch path."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel

from .base import BaseTool


class ToolRegistry:
    """Registered tools, in registration order.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(MapTool(client))
        >>> registry.get("firecrawl_map")
        MapTool(name='firecrawl_map')
        >>> registry.get("nope") is None
        True
    """

    __slots__ = ("_tools",)

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool[BaseModel]] = {}

    def register(self, tool: BaseTool[BaseModel]) -> None:
        name = tool.metadata.name
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered. Use unregister() first.")
        self._tools[name] = tool

    def unregister(self, name: str) -> bool:
        """Remove a tool by name. Returns True if found."""
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> BaseTool[BaseModel] | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __iter__(self) -> Iterator[BaseTool[BaseModel]]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __repr__(self) -> str:
        return f"ToolRegistry(tools={self.names()})"
