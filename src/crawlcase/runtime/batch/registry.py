"""In-memory job registry: the single source of truth for batch job status.

Records live for the process lifetime; there is no eviction and no
persistence. Status only moves forward:

    pending -> processing -> completed | failed
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from crawlcase.foundation.errors import JsonDict

JOB_ID_PREFIX = "batch_"


class JobStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """A caller tried to move a job backwards, out of a terminal state, or to touch an unknown id."""


@dataclass(slots=True)
class JobProgress:
    completed: int
    total: int


@dataclass(slots=True)
class JobRecord:
    """One queued batch execution unit.

    ``inputs`` and ``options`` are frozen at creation; everything else is
    written only by JobRegistry.transition().
    """
    id: str
    inputs: tuple[str, ...]
    options: Mapping[str, Any]
    status: JobStatus = JobStatus.PENDING
    progress: JobProgress = field(default_factory=lambda: JobProgress(0, 0))
    result: Any = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def duration_ms(self) -> float | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def to_status(self) -> JsonDict:
        """Status-check view: only the fields that apply to the current state."""
        out: JsonDict = {
            "id": self.id,
            "status": self.status.value,
            "progress": {"completed": self.progress.completed, "total": self.progress.total},
        }
        if self.status is JobStatus.COMPLETED:
            out["result"] = self.result
        elif self.status is JobStatus.FAILED:
            out["error"] = self.error
        return out


class JobRegistry:
    """Maps job ids to JobRecords.

    Example:
        >>> registry = JobRegistry()
        >>> job_id = registry.create(["https://a.test"], {"formats": ["markdown"]})
        >>> job_id
        'batch_1'
        >>> registry.get(job_id).status
        <JobStatus.PENDING: 'pending'>
    """

    __slots__ = ("_jobs", "_sequence", "_prefix")

    def __init__(self, prefix: str = JOB_ID_PREFIX) -> None:
        self._jobs: dict[str, JobRecord] = {}
        self._sequence = itertools.count(1)
        self._prefix = prefix

    def create(self, inputs: Iterable[str], options: Mapping[str, Any] | None = None) -> str:
        """Register a new pending job and return its id."""
        urls = tuple(inputs)
        job_id = f"{self._prefix}{next(self._sequence)}"
        self._jobs[job_id] = JobRecord(
            id=job_id,
            inputs=urls,
            options=MappingProxyType(dict(options or {})),
            progress=JobProgress(0, len(urls)),
        )
        return job_id

    def get(self, job_id: str) -> JobRecord | None:
        return self._jobs.get(job_id)

    def transition(
        self,
        job_id: str,
        status: JobStatus,
        *,
        result: Any = None,
        error: str | None = None,
    ) -> JobRecord:
        """Move a job to ``status``, storing ``result`` or ``error`` for terminal states.

        Raises:
            InvalidTransitionError: unknown id or a transition the state machine forbids
        """
        record = self._jobs.get(job_id)
        if record is None:
            raise InvalidTransitionError(f"Unknown job id: {job_id}")
        if status not in _TRANSITIONS[record.status]:
            raise InvalidTransitionError(f"Job {job_id}: cannot move from {record.status} to {status}")

        now = datetime.now(UTC)
        match status:
            case JobStatus.PROCESSING:
                record.started_at = now
            case JobStatus.COMPLETED:
                record.result = result
                # Coarse progress: a completed job reports every input done
                record.progress.completed = record.progress.total
                record.finished_at = now
            case JobStatus.FAILED:
                record.error = error or "Batch operation failed"
                record.finished_at = now
        record.status = status
        return record

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    def __iter__(self) -> Iterator[JobRecord]:
        return iter(self._jobs.values())

    def __repr__(self) -> str:
        return f"JobRegistry(jobs={len(self._jobs)})"
