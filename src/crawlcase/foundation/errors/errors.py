"""Standardized error handling for tools and the batch runtime.

Provides error codes, structured error responses, and the transient/terminal
failure classification that drives retry decisions.
Uses Pydantic for validation and serialization.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from functools import lru_cache
from typing import Annotated, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


class ErrorCode(StrEnum):
    """Standard error codes for tool failures.

    Used for programmatic error handling and retry decisions.
    """
    API_KEY_MISSING = "API_KEY_MISSING"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_PARAMS = "INVALID_PARAMS"
    NOT_FOUND = "NOT_FOUND"
    NOT_SUPPORTED = "NOT_SUPPORTED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    UNKNOWN = "UNKNOWN"


class FailureKind(StrEnum):
    """Retry classification of a failed remote call."""
    TRANSIENT = "transient"
    TERMINAL = "terminal"


# Ordered pattern -> code mapping; first hit wins
_PATTERN_CODES: dict[str, ErrorCode] = {
    "rate limit": ErrorCode.RATE_LIMITED,
    "429": ErrorCode.RATE_LIMITED,
    "timeout": ErrorCode.TIMEOUT,
    "timed out": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "not supported": ErrorCode.NOT_SUPPORTED,
    "validation": ErrorCode.INVALID_PARAMS,
    "not found": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())

# Substrings marking a rate-limit shaped message
_RATE_LIMIT_MARKERS: tuple[str, ...] = ("rate limit", "429")


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    """Cached classification by exception signature."""
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.EXTERNAL_SERVICE_ERROR


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code, preferring structured codes over message patterns."""
    if isinstance(exc, ToolException):
        return exc.error.code
    status = getattr(exc, "status_code", None)
    if status == 429:
        return ErrorCode.RATE_LIMITED
    return _classify_cached(f"{type(exc).__name__} {exc}")


def is_rate_limit_message(message: str) -> bool:
    """Case-insensitive check for a rate-limit signature in an error message."""
    lowered = message.lower()
    return any(marker in lowered for marker in _RATE_LIMIT_MARKERS)


def classify_failure(exc: BaseException) -> FailureKind:
    """Tag a failure as transient (retry-eligible) or terminal.

    Structured signals are checked first: a ToolException carrying
    RATE_LIMITED, or any exception exposing ``status_code == 429``.
    Otherwise the message is matched for "rate limit" or "429".
    """
    if isinstance(exc, ToolException):
        return FailureKind.TRANSIENT if exc.error.code == ErrorCode.RATE_LIMITED else FailureKind.TERMINAL
    if getattr(exc, "status_code", None) == 429:
        return FailureKind.TRANSIENT
    return FailureKind.TRANSIENT if is_rate_limit_message(str(exc)) else FailureKind.TERMINAL


class ToolError(BaseModel):
    """Structured error response for tool failures.

    Attributes:
        tool_name: Name of the tool that failed
        message: Human-readable error message
        code: Machine-readable error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        details: Optional detailed information (e.g., stack trace)
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Tool Error",
            "description": "Structured error from tool execution",
            "examples": [{
                "tool_name": "firecrawl_scrape",
                "message": "Rate limit exceeded",
                "code": "RATE_LIMITED",
                "recoverable": True,
            }],
        },
    )

    tool_name: Annotated[str, Field(min_length=1)]
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = True
    details: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return str(v) if isinstance(v, Exception) else v

    @computed_field
    @property
    def is_retryable(self) -> bool:
        """Whether the batch executor would retry this error."""
        return self.code == ErrorCode.RATE_LIMITED

    @classmethod
    def create(
        cls,
        tool_name: str,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        *,
        recoverable: bool = True,
        details: str | None = None,
    ) -> Self:
        return cls(tool_name=tool_name, message=message, code=code, recoverable=recoverable, details=details)

    @classmethod
    def from_exception(
        cls,
        tool_name: str,
        exc: Exception,
        context: str = "",
        *,
        recoverable: bool = True,
        include_trace: bool = False,
    ) -> Self:
        """Create from exception with auto-classification."""
        return cls(
            tool_name=tool_name,
            message=f"{context}: {exc}" if context else str(exc),
            code=classify_exception(exc),
            recoverable=recoverable,
            details=traceback.format_exc() if include_trace else None,
        )

    def render(self) -> str:
        return self.message

    __str__ = render


class ToolException(Exception):
    """Exception wrapping a ToolError for raising."""

    __slots__ = ("error",)

    def __init__(self, error: ToolError) -> None:
        self.error = error
        super().__init__(error.message)

    @classmethod
    def create(cls, tool_name: str, message: str, code: ErrorCode = ErrorCode.UNKNOWN, *, recoverable: bool = True) -> Self:
        return cls(ToolError(tool_name=tool_name, message=message, code=code, recoverable=recoverable))


class ConfigurationError(Exception):
    """Startup configuration is unusable (e.g. no API key for the cloud API)."""
