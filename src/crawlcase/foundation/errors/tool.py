"""Integration between Result and the ToolError system."""

from __future__ import annotations

from typing import TypeAlias

from .errors import ErrorCode, ToolError, classify_exception
from .result import Err, Ok, Result
from .types import ErrorTrace, trace, trace_from_exc

ToolResult: TypeAlias = Result[str, ErrorTrace]


def ok_result(value: str) -> ToolResult:
    return Ok(value)


def tool_result(
    tool_name: str,
    message: str,
    *,
    code: ErrorCode = ErrorCode.UNKNOWN,
    recoverable: bool = True,
    details: str | None = None,
) -> ToolResult:
    """Create Err ToolResult from error parameters."""
    return Err(trace(message, code=code.value, recoverable=recoverable, details=details).with_operation(f"tool:{tool_name}"))


def exception_result(tool_name: str, exc: Exception) -> ToolResult:
    """Convert a caught exception to an Err ToolResult, classified by ErrorCode."""
    return Err(trace_from_exc(exc, operation=f"tool:{tool_name}", code=classify_exception(exc).value))


def to_tool_error(result: ToolResult, tool_name: str) -> ToolError:
    """Convert Err Result to ToolError. Raises ValueError if Ok."""
    if result.is_ok():
        raise ValueError("Cannot convert Ok result to ToolError")

    err = result.unwrap_err()
    code = ErrorCode.UNKNOWN
    if err.error_code:
        try:
            code = ErrorCode(err.error_code)
        except ValueError:
            pass
    return ToolError(tool_name=tool_name, message=err.message, code=code, recoverable=err.recoverable, details=err.details)
