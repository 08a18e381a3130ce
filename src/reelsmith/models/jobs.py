"""Job registry state models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class JobKind(StrEnum):
    BATCH = "batch"
    SCRAPE = "scrape"
    VIDEO = "video"


class JobStatus(StrEnum):
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobState(BaseModel):
    """Current state of a long-running job."""

    job_id: str = Field(..., min_length=1)
    kind: JobKind
    status: JobStatus = JobStatus.RUNNING
    cancel_requested: bool = False
    message: str = ""
    started_at: datetime | None = None
    updated_at: datetime | None = None
