"""Retry policy and the backoff executor.

Rate-limit failures from the remote service are retried with exponential
backoff; every other failure propagates immediately. The retry decision is a
pure function of the failure's FailureKind tag and the attempt number.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from crawlcase.foundation.errors import FailureKind, classify_failure

from .backoff import Backoff, ExponentialBackoff

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from crawlcase.foundation.config import RetrySettings


logger = logging.getLogger("crawlcase.retry")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryNotice:
    """Emitted before each retry."""
    context: str
    attempt: int
    max_attempts: int
    delay_ms: int
    error: str


class RetryPolicy(BaseModel):
    """Configurable retry policy for remote calls.

    Attributes:
        max_attempts: Total attempts including the first call (1 = never retry)
        backoff: Backoff strategy for delay calculation
        on_retry: Optional callback receiving a RetryNotice before each retry

    Example:
        >>> policy = RetryPolicy(max_attempts=3, backoff=ExponentialBackoff(initial_delay=500))
        >>> policy.get_delay(2)
        1000
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For Backoff protocol
        validate_default=True,
        extra="forbid",
        json_schema_extra={
            "title": "Retry Policy",
            "examples": [{"max_attempts": 3}],
        },
    )

    max_attempts: Annotated[int, Field(ge=1, le=20)] = 3
    backoff: Backoff = Field(default_factory=ExponentialBackoff, repr=False)
    on_retry: Callable[[RetryNotice], None] | None = Field(default=None, exclude=True, repr=False)

    @classmethod
    def from_settings(cls, settings: RetrySettings, **kwargs: object) -> RetryPolicy:
        """Build a policy from FIRECRAWL_RETRY_* settings."""
        return cls(
            max_attempts=settings.max_attempts,
            backoff=ExponentialBackoff(
                initial_delay=settings.initial_delay,
                max_delay=settings.max_delay,
                factor=settings.backoff_factor,
            ),
            **kwargs,
        )

    @computed_field
    @property
    def is_disabled(self) -> bool:
        return self.max_attempts <= 1

    def should_retry(self, kind: FailureKind, attempt: int) -> bool:
        """Whether to retry after failed attempt ``attempt`` (1-based)."""
        return kind is FailureKind.TRANSIENT and attempt < self.max_attempts

    def get_delay(self, attempt: int) -> int:
        """Milliseconds to wait after failed attempt ``attempt``."""
        return self.backoff.delay(attempt)

    def __hash__(self) -> int:
        return hash((self.max_attempts, self.backoff))


DEFAULT_RETRY = RetryPolicy()
NO_RETRY = RetryPolicy(max_attempts=1)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    context: str,
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying transient failures with backoff.

    Terminal failures, and transient failures on the last allowed attempt,
    are re-raised unchanged.

    Args:
        operation: Zero-arg async callable; called once per attempt
        context: Label used in retry notices (e.g. "batch batch_1 processing")
        policy: Retry policy (default: 3 attempts, 1s/2s/4s... capped at 10s)
        sleep: Awaitable sleep taking seconds; injectable for tests

    Returns:
        The operation's result from the first successful attempt
    """
    policy = policy or DEFAULT_RETRY
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if not policy.should_retry(classify_failure(exc), attempt):
                raise
            delay = policy.get_delay(attempt)
            logger.warning(
                "Rate limit hit for %s. Attempt %d/%d. Retrying in %dms",
                context, attempt, policy.max_attempts, delay,
            )
            if policy.on_retry:
                policy.on_retry(RetryNotice(context, attempt, policy.max_attempts, delay, str(exc)))
        await sleep(delay / 1000)
        attempt += 1
