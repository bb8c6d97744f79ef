"""Cumulative credit usage tracking with threshold notices.

The monitor only ever grows. After every increment it checks the critical
threshold, then the warning threshold, and emits at most one notice.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from crawlcase.foundation.config import CreditSettings

logger = logging.getLogger("crawlcase.usage")


class UsageLevel(StrEnum):
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True, slots=True)
class UsageNotice:
    level: UsageLevel
    total: int
    threshold: int

    @property
    def message(self) -> str:
        if self.level is UsageLevel.CRITICAL:
            return f"CRITICAL: Credit usage has reached {self.total}"
        return f"Credit usage has reached warning threshold: {self.total}"


class UsageMonitor:
    """Running credit total with warning/critical notices.

    Example:
        >>> monitor = UsageMonitor(warning_threshold=1000, critical_threshold=100)
        >>> monitor.record(50) is None
        True
        >>> monitor.record(60).level
        <UsageLevel.CRITICAL: 'critical'>
    """

    __slots__ = ("_total", "_warning", "_critical", "_on_notice", "_last_update")

    def __init__(
        self,
        warning_threshold: int = 1000,
        critical_threshold: int = 100,
        *,
        on_notice: Callable[[UsageNotice], None] | None = None,
    ) -> None:
        self._total = 0
        self._warning = warning_threshold
        self._critical = critical_threshold
        self._on_notice = on_notice
        self._last_update: float | None = None

    @classmethod
    def from_settings(cls, settings: CreditSettings, **kwargs: object) -> UsageMonitor:
        return cls(settings.warning_threshold, settings.critical_threshold, **kwargs)  # type: ignore[arg-type]

    @property
    def total(self) -> int:
        return self._total

    @property
    def last_update(self) -> float | None:
        """Wall-clock time of the last record() call, or None."""
        return self._last_update

    def record(self, amount: int) -> UsageNotice | None:
        """Add ``amount`` credits and return the notice it triggered, if any."""
        self._total += max(amount, 0)
        self._last_update = time.time()

        if self._total >= self._critical:
            notice = UsageNotice(UsageLevel.CRITICAL, self._total, self._critical)
            logger.error(notice.message)
        elif self._total >= self._warning:
            notice = UsageNotice(UsageLevel.WARNING, self._total, self._warning)
            logger.warning(notice.message)
        else:
            return None

        if self._on_notice:
            self._on_notice(notice)
        return notice

    def __repr__(self) -> str:
        return f"UsageMonitor(total={self._total}, warning={self._warning}, critical={self._critical})"
