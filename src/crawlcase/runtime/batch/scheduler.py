"""FIFO batch scheduler with a bounded number of concurrent workers.

Design: an asyncio.Queue of job ids drained by ``concurrency`` worker tasks.
A job has up to two steps: the runner starts the remote work and goes through
the backoff executor; the optional waiter then awaits the remote job outside
the executor, so a retry never submits the same job twice. The outcome is
written to the JobRegistry and never raised back to the submitter, who only
holds the id.

With the default concurrency of 1 at most one remote batch call is in flight
at any time, and jobs complete in submission order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable

from crawlcase.runtime.retry import RetryPolicy, execute_with_retry

from .registry import JobRecord, JobRegistry, JobStatus

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from crawlcase.runtime.usage import UsageMonitor

logger = logging.getLogger("crawlcase.batch")

JobRunner = Callable[[JobRecord], "Awaitable[Any]"]
JobWaiter = Callable[[JobRecord, Any], "Awaitable[Any]"]


def credits_used(response: object) -> int:
    """Chargeable credit count carried by a remote response, 0 if none."""
    if isinstance(response, dict):
        credits = response.get("creditsUsed")
        if isinstance(credits, int) and not isinstance(credits, bool) and credits > 0:
            return credits
    return 0


class BatchScheduler:
    """Queue of pending jobs executed by up to ``concurrency`` workers.

    Workers are started lazily on the first submit(), on the running loop.

    Example:
        >>> scheduler = BatchScheduler(registry, start_remote, wait_remote, concurrency=1)
        >>> scheduler.submit(registry.create(urls, options))
        >>> await scheduler.join()  # wait for everything queued so far
    """

    __slots__ = ("_registry", "_runner", "_waiter", "_concurrency", "_policy", "_monitor", "_queue", "_workers", "_sleep")

    def __init__(
        self,
        registry: JobRegistry,
        runner: JobRunner,
        waiter: JobWaiter | None = None,
        *,
        concurrency: int = 1,
        retry_policy: RetryPolicy | None = None,
        usage_monitor: UsageMonitor | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._registry = registry
        self._runner = runner
        self._waiter = waiter
        self._concurrency = concurrency
        self._policy = retry_policy
        self._monitor = usage_monitor
        self._sleep = sleep
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._workers: list[asyncio.Task[None]] = []

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def pending(self) -> int:
        """Jobs queued but not yet picked up by a worker."""
        return self._queue.qsize()

    def submit(self, job_id: str) -> None:
        """Queue a job for execution. Never blocks."""
        if job_id not in self._registry:
            raise KeyError(job_id)
        self._ensure_workers()
        self._queue.put_nowait(job_id)
        logger.debug("Queued %s (%d waiting)", job_id, self._queue.qsize())

    async def join(self) -> None:
        """Wait until every job submitted so far has finished."""
        await self._queue.join()

    async def aclose(self) -> None:
        """Cancel the worker tasks. Jobs still queued stay pending."""
        workers, self._workers = self._workers, []
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

    def _ensure_workers(self) -> None:
        self._workers = [t for t in self._workers if not t.done()]
        loop = asyncio.get_running_loop()
        while len(self._workers) < self._concurrency:
            n = len(self._workers) + 1
            self._workers.append(loop.create_task(self._worker(), name=f"batch-worker-{n}"))

    async def _worker(self) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                await self._process(job_id)
            except Exception:
                # Registry misuse is a bug; keep the worker alive for the next job
                logger.exception("Unexpected error while processing %s", job_id)
            finally:
                self._queue.task_done()

    async def _process(self, job_id: str) -> None:
        record = self._registry.transition(job_id, JobStatus.PROCESSING)
        logger.info("Processing %s (%d urls)", job_id, len(record.inputs))

        try:
            response = await execute_with_retry(
                lambda: self._runner(record),
                f"batch {job_id} processing",
                self._policy,
                sleep=self._sleep,
            )
            if self._waiter is not None:
                logger.debug("Batch %s started remote job %s", job_id, response)
                response = await self._waiter(record, response)
        except Exception as exc:
            self._registry.transition(job_id, JobStatus.FAILED, error=str(exc) or type(exc).__name__)
            logger.error("Batch %s failed: %s", job_id, exc)
            return

        record = self._registry.transition(job_id, JobStatus.COMPLETED, result=response)
        logger.info("Batch %s completed in %.0fms", job_id, record.duration_ms or 0.0)

        if self._monitor is not None and (credits := credits_used(response)):
            self._monitor.record(credits)
