"""In-memory generation jobs, their progress events and the task that runs them.

A :class:`GenerationJob` moves forward only: ``pending`` to ``processing`` to
either ``complete`` or ``error``. Every change is fanned out to subscriber
queues as a :data:`JobEvent`, which the HTTP service serialises with msgspec
and streams as Server-Sent Events. :class:`JobStore` keeps jobs for a
retention window and a reaper coroutine drops expired ones.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import enum
import logging
import time
import typing as typ
import uuid

import msgspec
import msgspec.json as msgspec_json

from ._constants import JOB_RETENTION_SECONDS, REAPER_INTERVAL_SECONDS

if typ.TYPE_CHECKING:
    from .config import ProjectConfig
    from .generator.models import ProjectArchive
    from .generator.project import ProjectGenerator

logger = logging.getLogger(__name__)


class JobStatus(enum.StrEnum):
    """Lifecycle states of a generation job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` for ``complete`` and ``error``."""
        return self in (JobStatus.COMPLETE, JobStatus.ERROR)


_RANK: typ.Final[dict[JobStatus, int]] = {
    JobStatus.PENDING: 0,
    JobStatus.PROCESSING: 1,
    JobStatus.COMPLETE: 2,
    JobStatus.ERROR: 2,
}


class JobStateError(RuntimeError):
    """Raised when a job is asked to move backwards or leave a final state."""


class Progress(msgspec.Struct):
    """Progress snapshot reported to subscribers."""

    step: int = 0
    total: int = 0
    message: str = "Initializing..."


class ProgressEvent(msgspec.Struct, tag="progress", tag_field="type"):
    """A job advanced to a new step."""

    data: Progress


class CompleteEvent(msgspec.Struct, tag="complete", tag_field="type"):
    """The archive is ready for download."""


class ErrorEvent(msgspec.Struct, tag="error", tag_field="type"):
    """The job failed; ``data`` carries the message."""

    data: str


JobEvent = ProgressEvent | CompleteEvent | ErrorEvent


def encode_event(event: JobEvent) -> bytes:
    """Return the JSON encoding of ``event``.

    >>> encode_event(CompleteEvent())
    b'{"type":"complete"}'
    """
    return msgspec_json.encode(event)


def is_terminal_event(event: JobEvent) -> bool:
    """Return ``True`` when ``event`` ends a progress stream."""
    return isinstance(event, CompleteEvent | ErrorEvent)


@dc.dataclass(slots=True, eq=False)
class GenerationJob:
    """One generation request and everything observers need to follow it."""

    id: str = dc.field(default_factory=lambda: str(uuid.uuid4()))
    status: JobStatus = JobStatus.PENDING
    progress: Progress = dc.field(default_factory=Progress)
    result: ProjectArchive | None = None
    error: str | None = None
    created_at: float = dc.field(default_factory=time.time)
    _subscribers: set[asyncio.Queue[JobEvent]] = dc.field(
        default_factory=set, repr=False
    )

    def subscribe(self) -> asyncio.Queue[JobEvent]:
        """Return a queue receiving this job's events.

        The queue starts with the current state. For a finished job it holds
        only the terminal event and is not registered for further updates.
        """
        queue: asyncio.Queue[JobEvent] = asyncio.Queue()
        terminal = self._terminal_event()
        if terminal is not None:
            queue.put_nowait(terminal)
            return queue
        queue.put_nowait(ProgressEvent(data=self.progress))
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[JobEvent]) -> None:
        """Stop delivering events to ``queue``; unknown queues are ignored."""
        self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        """Return the number of registered subscriber queues."""
        return len(self._subscribers)

    def publish(self, event: JobEvent) -> None:
        """Deliver ``event`` to every subscriber.

        Terminal events also release all subscribers.
        """
        for queue in list(self._subscribers):
            queue.put_nowait(event)
        if is_terminal_event(event):
            self._subscribers.clear()

    def mark_processing(self) -> None:
        """Move the job from ``pending`` to ``processing``."""
        self._advance(JobStatus.PROCESSING)

    def update_progress(self, step: int, total: int, message: str) -> None:
        """Record and publish a progress snapshot.

        Raises
        ------
        JobStateError
            If the job has already finished.
        """
        if self.status.is_terminal:
            msg = f"Job {self.id} is {self.status}; progress can no longer change."
            raise JobStateError(msg)
        self.progress = Progress(step=step, total=total, message=message)
        self.publish(ProgressEvent(data=self.progress))

    def complete(self, archive: ProjectArchive) -> None:
        """Store ``archive`` and notify subscribers."""
        self._advance(JobStatus.COMPLETE)
        self.result = archive
        self.publish(CompleteEvent())

    def fail(self, message: str) -> None:
        """Record ``message`` and notify subscribers."""
        self._advance(JobStatus.ERROR)
        self.error = message
        self.publish(ErrorEvent(data=message))

    def snapshot(self) -> dict[str, typ.Any]:
        """Return a JSON-ready view of the job's public state."""
        return {
            "id": self.id,
            "status": str(self.status),
            "progress": msgspec.to_builtins(self.progress),
            "error": self.error,
            "projectName": self.result.project_name if self.result else None,
            "createdAt": self.created_at,
        }

    def _advance(self, status: JobStatus) -> None:
        if _RANK[status] <= _RANK[self.status]:
            msg = f"Job {self.id} cannot move from {self.status} to {status}."
            raise JobStateError(msg)
        self.status = status

    def _terminal_event(self) -> JobEvent | None:
        match self.status:
            case JobStatus.COMPLETE:
                return CompleteEvent()
            case JobStatus.ERROR:
                return ErrorEvent(data=self.error or "Generation failed")
            case _:
                return None


class JobStore:
    """Registry of live jobs with time-based expiry."""

    def __init__(self, *, retention: float = JOB_RETENTION_SECONDS) -> None:
        self.retention = retention
        self._jobs: dict[str, GenerationJob] = {}
        self._lock = asyncio.Lock()

    async def create(self) -> GenerationJob:
        """Register and return a new pending job."""
        job = GenerationJob()
        async with self._lock:
            self._jobs[job.id] = job
        return job

    async def get(self, job_id: str) -> GenerationJob | None:
        """Return the job registered under ``job_id``, if any."""
        async with self._lock:
            return self._jobs.get(job_id)

    async def purge_expired(self, now: float | None = None) -> list[str]:
        """Drop jobs older than the retention window and return their ids.

        Jobs already handed to callers stay usable; only the registry entry
        goes away.
        """
        current = time.time() if now is None else now
        async with self._lock:
            expired = [
                job_id
                for job_id, job in self._jobs.items()
                if current - job.created_at > self.retention
            ]
            for job_id in expired:
                del self._jobs[job_id]
        if expired:
            logger.info("Purged %d expired job(s)", len(expired))
        return expired

    async def run_reaper(self, interval: float = REAPER_INTERVAL_SECONDS) -> None:
        """Purge expired jobs every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.purge_expired()

    def __len__(self) -> int:
        return len(self._jobs)


class JobOrchestrator:
    """Start generation jobs as background tasks."""

    def __init__(self, store: JobStore, generator: ProjectGenerator) -> None:
        self.store = store
        self.generator = generator
        self._tasks: set[asyncio.Task[None]] = set()

    async def start(self, config: ProjectConfig) -> GenerationJob:
        """Create a job for ``config`` and schedule it on the running loop."""
        job = await self.store.create()
        task = asyncio.create_task(self.run(job, config), name=f"job-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("Started job %s for %r", job.id, config.brand)
        return job

    async def run(self, job: GenerationJob, config: ProjectConfig) -> None:
        """Generate the archive for ``job``; every failure ends up on the job."""
        try:
            job.mark_processing()
            archive = await self.generator.generate(config, job.update_progress)
        except Exception as exc:
            logger.exception("Job %s failed", job.id)
            if not job.status.is_terminal:
                job.fail(str(exc) or exc.__class__.__name__)
            return
        job.complete(archive)
        logger.info("Job %s complete (%d KB)", job.id, archive.size // 1024)

    async def wait_idle(self) -> None:
        """Wait for every running job task to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel running jobs and wait for them to stop."""
        for task in self._tasks:
            task.cancel()
        await self.wait_idle()


__all__ = [
    "CompleteEvent",
    "ErrorEvent",
    "GenerationJob",
    "JobEvent",
    "JobOrchestrator",
    "JobStateError",
    "JobStatus",
    "JobStore",
    "Progress",
    "ProgressEvent",
    "encode_event",
    "is_terminal_event",
]
