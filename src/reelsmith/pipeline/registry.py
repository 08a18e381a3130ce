"""Registry of long-running jobs and their cancellation flags."""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from reelsmith.models.jobs import JobKind, JobState, JobStatus

logger = logging.getLogger(__name__)


class JobRegistry:
    """Maps job ids to status and a cooperative cancellation flag.

    One registry is owned by whoever starts jobs (the HTTP layer) and is
    handed to workers only as a ``should_cancel`` callable. Finished jobs stay
    queryable for ``retention`` and are then dropped.
    """

    def __init__(self, retention: timedelta = timedelta(hours=1)):
        self.retention = retention
        self._jobs: dict[str, JobState] = {}

    def create(self, kind: JobKind) -> JobState:
        """Register a new running job."""
        self.prune()
        now = datetime.now(UTC)
        state = JobState(job_id=str(uuid.uuid4()), kind=kind, started_at=now, updated_at=now)
        self._jobs[state.job_id] = state
        return state

    def get(self, job_id: str) -> JobState | None:
        return self._jobs.get(job_id)

    def active(self, kind: JobKind | None = None) -> list[JobState]:
        return [
            s
            for s in self._jobs.values()
            if s.status == JobStatus.RUNNING and (kind is None or s.kind == kind)
        ]

    def is_cancelled(self, job_id: str) -> bool:
        state = self._jobs.get(job_id)
        return state is not None and state.cancel_requested

    def cancel_check(self, job_id: str) -> Callable[[], bool]:
        """Return a zero-argument cancellation query for ``job_id``."""
        return lambda: self.is_cancelled(job_id)

    def cancel(self, job_id: str) -> bool:
        """Request cancellation of a running job."""
        state = self._jobs.get(job_id)
        if state is None or state.status != JobStatus.RUNNING:
            return False
        state.cancel_requested = True
        state.message = "Cancellation requested"
        state.updated_at = datetime.now(UTC)
        logger.info("Cancellation requested for %s job %s", state.kind, job_id)
        return True

    def cancel_all(self, kind: JobKind | None = None) -> int:
        """Request cancellation of every running job of ``kind``."""
        return sum(self.cancel(s.job_id) for s in self.active(kind))

    def finish(self, job_id: str, status: JobStatus, message: str = "") -> None:
        state = self._jobs.get(job_id)
        if state is None:
            return
        if status == JobStatus.COMPLETE and state.cancel_requested:
            status = JobStatus.CANCELLED
        state.status = status
        state.message = message
        state.updated_at = datetime.now(UTC)
        self.prune()

    def remove(self, job_id: str) -> None:
        self._jobs.pop(job_id, None)

    def prune(self) -> int:
        """Drop finished jobs last updated before the retention window."""
        cutoff = datetime.now(UTC) - self.retention
        expired = [
            job_id
            for job_id, s in self._jobs.items()
            if s.status != JobStatus.RUNNING and s.updated_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.debug("Pruned %d finished jobs", len(expired))
        return len(expired)
