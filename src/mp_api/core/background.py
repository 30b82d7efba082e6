"""Background task runner abstraction.

Provides a protocol for submitting and tracking background tasks with an
in-process asyncio implementation. Failed jobs are recorded and logged so
that fire-and-forget work (such as categorizing every bill a representative
voted on) stays observable.
"""

import asyncio
import enum
import uuid
from collections import deque
from collections.abc import Coroutine
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from loguru import logger


class JobStatus(enum.StrEnum):
    """Status of a background job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class JobFailure:
    """A recorded background job failure."""

    job_id: str
    name: str
    error: str
    failed_at: datetime


class BackgroundTaskRunner(Protocol):
    """Protocol for background task execution."""

    def submit_task(self, coro: Coroutine[Any, Any, Any], *, name: str = "task") -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.
            name: Human-readable label used in logs and failure records.

        Returns:
            A job ID string for tracking.
        """
        ...

    def get_status(self, job_id: str) -> JobStatus:
        """Get the current status of a background job.

        Args:
            job_id: The job ID returned by submit_task.

        Returns:
            The current job status.
        """
        ...

    def failures(self) -> list[JobFailure]:
        """Return the failures recorded so far, oldest first."""
        ...


class InProcessTaskRunner:
    """In-process background task runner using asyncio.

    Tasks run in the same event loop as the API server. Strong references
    to running tasks are held until they finish. Only the statuses of the
    most recent ``max_finished_jobs`` finished jobs are kept.
    """

    def __init__(self, max_recorded_failures: int = 100, max_finished_jobs: int = 100) -> None:
        self._jobs: dict[str, JobStatus] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._finished: deque[str] = deque()
        self._failures: list[JobFailure] = []
        self._max_recorded_failures = max_recorded_failures
        self._max_finished_jobs = max_finished_jobs
        self.failure_count = 0

    def submit_task(self, coro: Coroutine[Any, Any, Any], *, name: str = "task") -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.
            name: Human-readable label used in logs and failure records.

        Returns:
            A job ID string for tracking.
        """
        job_id = str(uuid.uuid4())
        self._jobs[job_id] = JobStatus.PENDING

        async def _run() -> None:
            self._jobs[job_id] = JobStatus.RUNNING
            try:
                await coro
                self._jobs[job_id] = JobStatus.COMPLETED
            except Exception as exc:
                self._jobs[job_id] = JobStatus.FAILED
                self._record_failure(job_id, name, exc)
            finally:
                self._tasks.pop(job_id, None)
                self._mark_finished(job_id)

        task = asyncio.create_task(_run(), name=f"{name}:{job_id}")
        self._tasks[job_id] = task
        return job_id

    def _mark_finished(self, job_id: str) -> None:
        self._finished.append(job_id)
        while len(self._finished) > self._max_finished_jobs:
            self._jobs.pop(self._finished.popleft(), None)

    def _record_failure(self, job_id: str, name: str, exc: Exception) -> None:
        self.failure_count += 1
        self._failures.append(JobFailure(job_id=job_id, name=name, error=str(exc), failed_at=datetime.now(UTC)))
        if len(self._failures) > self._max_recorded_failures:
            del self._failures[0]
        logger.opt(exception=exc).error(f"Background job {name} ({job_id}) failed: {exc}")

    def get_status(self, job_id: str) -> JobStatus:
        """Get the current status of a background job.

        Args:
            job_id: The job ID returned by submit_task.

        Returns:
            The current job status.

        Raises:
            KeyError: If the job ID is unknown or its status has been evicted.
        """
        return self._jobs[job_id]

    def failures(self) -> list[JobFailure]:
        """Return the failures recorded so far, oldest first."""
        return list(self._failures)

    async def wait_idle(self) -> None:
        """Wait until every submitted task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel tasks that are still running."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
