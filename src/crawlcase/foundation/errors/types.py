"""Error trace carried by failed tool results.

Uses Pydantic models for validation/serialization; hot paths build traces with
``model_construct`` to skip validation.
"""

from __future__ import annotations

from typing import Annotated, Any, TypeAlias, Union

from pydantic import BaseModel, ConfigDict, Field

JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]

_EMPTY_OPERATIONS: tuple[str, ...] = ()


class ErrorTrace(BaseModel):
    """Error message with code, recoverability and the chain of operations it passed through."""

    model_config = ConfigDict(
        frozen=True, str_strip_whitespace=True, validate_default=True, extra="forbid",
        revalidate_instances="never",
        json_schema_extra={"title": "Error Trace", "description": "Error with provenance tracking"},
    )

    message: Annotated[str, Field(min_length=1)]
    operations: tuple[str, ...] = _EMPTY_OPERATIONS
    error_code: str | None = None
    recoverable: bool = True
    details: str | None = Field(default=None, repr=False)

    def __hash__(self) -> int:
        return hash((self.message, self.error_code, self.recoverable))

    def with_operation(self, operation: str) -> "ErrorTrace":
        """Return a new trace with ``operation`` appended."""
        return ErrorTrace.model_construct(
            message=self.message,
            operations=(*self.operations, operation),
            error_code=self.error_code,
            recoverable=self.recoverable,
            details=self.details,
        )

    def format(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.append(f" [{self.error_code}]")
        if self.operations:
            parts.append(f" ({' <- '.join(self.operations)})")
        return "".join(parts)

    __str__ = format


ResultT: TypeAlias = "Result[str, ErrorTrace]"


def trace(message: str, *, code: str | None = None, recoverable: bool = True, details: str | None = None) -> ErrorTrace:
    """Create ErrorTrace concisely (bypasses validation)."""
    return ErrorTrace.model_construct(
        message=message,
        operations=_EMPTY_OPERATIONS,
        error_code=code,
        recoverable=recoverable,
        details=details,
    )


def trace_from_exc(exc: BaseException, *, operation: str = "", code: str | None = None) -> ErrorTrace:
    """Create ErrorTrace from exception with optional operation context."""
    import traceback
    t = ErrorTrace.model_construct(
        message=str(exc) or type(exc).__name__,
        operations=_EMPTY_OPERATIONS,
        error_code=code,
        recoverable=True,
        details="".join(traceback.format_exception(exc)),
    )
    return t.with_operation(operation) if operation else t
