"""Batch job and progress event models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class BatchStatus(StrEnum):
    """Per-item status reported to the progress sink."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class ProgressEvent(BaseModel):
    """Progress of one batch item, emitted at start and at its terminal outcome."""

    current: int = Field(..., ge=1, description="1-based item index")
    total: int = Field(..., ge=1)
    file: str = Field(..., description="Identifier of the item being processed")
    status: BatchStatus
    error: str | None = None
    output_path: str | None = None


class BatchJob(BaseModel):
    """One source video turned into one output file."""

    index: int = Field(..., ge=1)
    source_video: str
    overlay_images: list[str] = Field(default_factory=list)
    status: BatchStatus = BatchStatus.PROCESSING
    output_path: str | None = None
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == BatchStatus.COMPLETED


class BatchResult(BaseModel):
    """Outcome of a batch run."""

    jobs: list[BatchJob] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def outputs(self) -> list[str]:
        return [j.output_path for j in self.jobs if j.succeeded and j.output_path]

    @property
    def failures(self) -> list[BatchJob]:
        return [j for j in self.jobs if j.status == BatchStatus.ERROR]
