"""Unified error handling for crawlcase.

- ErrorCode: Standard error codes for tool failures
- FailureKind/classify_failure: transient vs terminal tagging for retries
- ToolError/ToolException: Structured errors and exceptions
- Result/Ok/Err: explicit success/failure values returned by tools
- ErrorTrace: error message with provenance
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    FailureKind,
    ToolError,
    ToolException,
    classify_exception,
    classify_failure,
    is_rate_limit_message,
)
from .result import Err, Ok, Result
from .tool import ToolResult, exception_result, ok_result, to_tool_error, tool_result
from .types import ErrorTrace, JsonDict, JsonValue, ResultT, trace, trace_from_exc

__all__ = [
    # Core errors
    "ErrorCode", "FailureKind", "ToolError", "ToolException", "ConfigurationError",
    "classify_exception", "classify_failure", "is_rate_limit_message",
    # Result
    "Result", "Ok", "Err", "ResultT",
    # Tool integration
    "ToolResult", "ok_result", "tool_result", "exception_result", "to_tool_error",
    # Error context
    "ErrorTrace", "trace", "trace_from_exc", "JsonDict", "JsonValue",
]
