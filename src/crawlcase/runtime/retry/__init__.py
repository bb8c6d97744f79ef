"""Retry with exponential backoff for rate-limited remote calls.

Example:
    >>> from crawlcase.runtime.retry import RetryPolicy, ExponentialBackoff, execute_with_retry
    >>>
    >>> policy = RetryPolicy(max_attempts=3, backoff=ExponentialBackoff(initial_delay=1000))
    >>> data = await execute_with_retry(lambda: client.search("python"), "search operation", policy)
"""

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff
from .policy import (
    DEFAULT_RETRY,
    NO_RETRY,
    RetryNotice,
    RetryPolicy,
    execute_with_retry,
)

__all__ = [
    # Backoff strategies
    "Backoff",
    "ExponentialBackoff",
    "ConstantBackoff",
    # Policy
    "RetryPolicy",
    "RetryNotice",
    "DEFAULT_RETRY",
    "NO_RETRY",
    # Execution
    "execute_with_retry",
]
