"""Backoff strategies for retry policies.

Delays are integer milliseconds. ``attempt`` is the 1-based number of the
attempt that just failed, so the first retry waits ``delay(1)``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def delay(self, attempt: int) -> int:
        """Milliseconds to wait after failed attempt number ``attempt`` (1-based)."""
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff, clamped.

    Delay = min(initial_delay * factor ^ (attempt - 1), max_delay)

    With the defaults, the retries leading to attempts 2, 3 and 4 wait
    1000, 2000 and 4000 ms; nothing ever waits more than 10000 ms.

    Attributes:
        initial_delay: Delay after the first failure in ms (default: 1000)
        max_delay: Cap in ms (default: 10000)
        factor: Exponential growth factor (default: 2)
        jitter: Scale each delay by a random 0.5-1.5x (default: False)
    """

    initial_delay: int = 1000
    max_delay: int = 10000
    factor: int = 2
    jitter: bool = False

    def delay(self, attempt: int) -> int:
        d = min(self.initial_delay * (self.factor ** (attempt - 1)), self.max_delay)
        return int(d * (0.5 + random.random())) if self.jitter else d


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between retries.

    Attributes:
        delay_ms: Fixed delay in milliseconds (default: 1000)
    """

    delay_ms: int = 1000

    def delay(self, attempt: int) -> int:
        return self.delay_ms
