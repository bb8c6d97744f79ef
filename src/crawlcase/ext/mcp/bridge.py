"""Bridge between crawlcase tools and MCP tool primitives.

FastMCP derives a tool's input schema from the handler's signature, so each
handler gets an explicit ``__signature__`` built from the tool's params model:
one keyword-only parameter per field, named by the field's wire alias.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, Field

from crawlcase.foundation.errors import ToolResult

if TYPE_CHECKING:
    from crawlcase.tools import BaseTool


def _parameters(schema: type[BaseModel]) -> list[inspect.Parameter]:
    params = []
    for name, info in schema.model_fields.items():
        annotation = Annotated[info.annotation or str, Field(description=info.description)]
        default = inspect.Parameter.empty if info.is_required() else info.get_default(call_default_factory=True)
        params.append(inspect.Parameter(info.alias or name, inspect.Parameter.KEYWORD_ONLY, default=default, annotation=annotation))
    return params


def tool_to_handler(
    tool: BaseTool[BaseModel],
    render: Callable[[ToolResult], str],
) -> Callable[..., Awaitable[str]]:
    """Wrap a tool as an async handler whose signature mirrors its params schema.

    ``render`` turns the tool's ToolResult into the transport's reply (or raises).
    """
    params = _parameters(tool.params_schema)

    async def handler(**kwargs: Any) -> str:
        return render(await tool.arun_result(kwargs))

    handler.__name__ = tool.metadata.name
    handler.__doc__ = tool.metadata.description
    handler.__signature__ = inspect.Signature(params, return_annotation=str)  # type: ignore[attr-defined]
    handler.__annotations__ = {p.name: p.annotation for p in params} | {"return": str}
    return handler


def get_tool_schema(tool: BaseTool[BaseModel]) -> dict[str, object]:
    """JSON schema of a tool's arguments, with wire (camelCase) property names."""
    return tool.params_schema.model_json_schema(by_alias=True)
