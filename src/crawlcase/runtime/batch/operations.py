"""Batch operations facade: submit a batch, check its status.

Wires a JobRegistry, a BatchScheduler and a UsageMonitor together. Submission
returns the job id synchronously; the remote work happens later on the
scheduler's workers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from crawlcase.foundation.errors import JsonDict
from crawlcase.runtime.retry import RetryPolicy
from crawlcase.runtime.usage import UsageMonitor

from .registry import JobRegistry
from .scheduler import BatchScheduler, JobRunner, JobWaiter

if TYPE_CHECKING:
    from crawlcase.foundation.config import CrawlcaseSettings


class BatchOperations:
    """Entry points used by the batch tools.

    Example:
        >>> ops = BatchOperations(runner)
        >>> ops.submit(["https://a.test", "https://b.test"])
        {'id': 'batch_1'}
        >>> ops.status("batch_1")["status"]
        'pending'
        >>> ops.status("batch_99") is None
        True
    """

    __slots__ = ("registry", "scheduler", "usage")

    def __init__(
        self,
        runner: JobRunner,
        waiter: JobWaiter | None = None,
        *,
        concurrency: int = 1,
        retry_policy: RetryPolicy | None = None,
        usage_monitor: UsageMonitor | None = None,
        registry: JobRegistry | None = None,
    ) -> None:
        self.registry = registry or JobRegistry()
        self.usage = usage_monitor or UsageMonitor()
        self.scheduler = BatchScheduler(
            self.registry, runner, waiter,
            concurrency=concurrency, retry_policy=retry_policy, usage_monitor=self.usage,
        )

    @classmethod
    def from_settings(
        cls, runner: JobRunner, settings: CrawlcaseSettings, waiter: JobWaiter | None = None,
    ) -> BatchOperations:
        return cls(
            runner, waiter,
            concurrency=settings.batch.concurrency,
            retry_policy=RetryPolicy.from_settings(settings.retry),
            usage_monitor=UsageMonitor.from_settings(settings.credit),
        )

    def submit(self, urls: Sequence[str], options: Mapping[str, Any] | None = None) -> JsonDict:
        """Create a pending job, queue it, and return ``{"id": ...}`` without waiting."""
        job_id = self.registry.create(urls, options)
        self.scheduler.submit(job_id)
        return {"id": job_id}

    def status(self, job_id: str) -> JsonDict | None:
        """Current status view of a job, or None for an id never issued."""
        record = self.registry.get(job_id)
        return record.to_status() if record is not None else None

    async def join(self) -> None:
        await self.scheduler.join()

    async def aclose(self) -> None:
        await self.scheduler.aclose()
