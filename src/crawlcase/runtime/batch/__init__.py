"""Queued batch execution with bounded concurrency.

Usage:
    from crawlcase.runtime.batch import BatchOperations

    ops = BatchOperations(runner, concurrency=1)
    job = ops.submit(["https://a.test", "https://b.test"], {"formats": ["markdown"]})
    ...
    ops.status(job["id"])   # {'id': 'batch_1', 'status': 'completed', 'progress': {...}, 'result': ...}
"""

from .operations import BatchOperations
from .registry import (
    JOB_ID_PREFIX,
    InvalidTransitionError,
    JobProgress,
    JobRecord,
    JobRegistry,
    JobStatus,
)
from .scheduler import BatchScheduler, JobRunner, JobWaiter, credits_used

__all__ = [
    "BatchOperations",
    "BatchScheduler",
    "JobRunner",
    "JobWaiter",
    "credits_used",
    "JobRegistry",
    "JobRecord",
    "JobProgress",
    "JobStatus",
    "InvalidTransitionError",
    "JOB_ID_PREFIX",
]
