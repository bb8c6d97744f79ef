"""Tests for Result, ToolError and the tool result helpers."""

from __future__ import annotations

import pytest

from crawlcase.foundation.errors import (
    Err,
    ErrorCode,
    Ok,
    ToolError,
    ToolException,
    classify_exception,
    exception_result,
    is_rate_limit_message,
    to_tool_error,
    tool_result,
    trace,
)
from crawlcase.io import FirecrawlError


# ═════════════════════════════════════════════════════════════════════════════
# Result
# ═════════════════════════════════════════════════════════════════════════════


def test_ok_and_err_construction() -> None:
    ok, err = Ok(1), Err("boom")
    assert ok.is_ok() and not ok.is_err()
    assert err.is_err() and not err.is_ok()
    assert ok.unwrap() == 1
    assert err.unwrap_err() == "boom"


def test_unwrap_wrong_side_raises() -> None:
    with pytest.raises(RuntimeError):
        Err("boom").unwrap()
    with pytest.raises(RuntimeError):
        Ok(1).unwrap_err()


def test_truthiness_equality_and_repr() -> None:
    assert bool(Ok(0)) and not bool(Err(0))
    assert Ok("x") == Ok("x") and hash(Ok("x")) == hash(Ok("x"))
    assert Ok(1) != Err(1)
    assert repr(Ok("x")) == "Ok('x')"
    assert str(Err("no")) == "Err('no')"


# ═════════════════════════════════════════════════════════════════════════════
# Errors
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (FirecrawlError("anything", 429), ErrorCode.RATE_LIMITED),
        (RuntimeError("Rate limit exceeded"), ErrorCode.RATE_LIMITED),
        (TimeoutError("timed out"), ErrorCode.TIMEOUT),
        (ConnectionError("connection refused"), ErrorCode.NETWORK_ERROR),
        (RuntimeError("extract is not supported"), ErrorCode.NOT_SUPPORTED),
        (RuntimeError("something odd"), ErrorCode.EXTERNAL_SERVICE_ERROR),
        (ToolException.create("t", "nope", ErrorCode.NOT_FOUND), ErrorCode.NOT_FOUND),
    ],
)
def test_classify_exception(exc: Exception, code: ErrorCode) -> None:
    assert classify_exception(exc) is code


def test_rate_limit_message_detection() -> None:
    assert is_rate_limit_message("RATE LIMIT reached")
    assert is_rate_limit_message("status code 429")
    assert not is_rate_limit_message("status code 500")


def test_tool_error_from_exception() -> None:
    err = ToolError.from_exception("firecrawl_map", FirecrawlError("slow down", 429), "map")
    assert err.message == "map: slow down"
    assert err.code is ErrorCode.RATE_LIMITED
    assert err.is_retryable
    assert err.render() == "map: slow down"


def test_tool_exception_carries_error() -> None:
    exc = ToolException.create("firecrawl_scrape", "bad", ErrorCode.INVALID_PARAMS, recoverable=False)
    assert str(exc) == "bad"
    assert exc.error.code is ErrorCode.INVALID_PARAMS
    assert not exc.error.recoverable


def test_tool_result_helpers() -> None:
    err = tool_result("firecrawl_scrape", "No content", code=ErrorCode.NOT_FOUND, recoverable=False)
    trace_ = err.unwrap_err()
    assert trace_.operations == ("tool:firecrawl_scrape",)
    assert trace_.format() == "No content [NOT_FOUND] (tool:firecrawl_scrape)"

    converted = to_tool_error(err, "firecrawl_scrape")
    assert converted.code is ErrorCode.NOT_FOUND
    assert converted.message == "No content"
    with pytest.raises(ValueError):
        to_tool_error(Ok("fine"), "firecrawl_scrape")


def test_exception_result_keeps_message_and_traceback() -> None:
    try:
        raise FirecrawlError("Request failed with status code 500. Error: oops", 500)
    except FirecrawlError as e:
        result = exception_result("firecrawl_search", e)
    t = result.unwrap_err()
    assert t.message == "Request failed with status code 500. Error: oops"
    assert t.error_code == ErrorCode.EXTERNAL_SERVICE_ERROR.value
    assert "FirecrawlError" in (t.details or "")


def test_trace_with_operation_is_immutable() -> None:
    base = trace("boom", code="UNKNOWN")
    chained = base.with_operation("a").with_operation("b")
    assert base.operations == ()
    assert chained.operations == ("a", "b")
    assert "a <- b" in str(chained)
