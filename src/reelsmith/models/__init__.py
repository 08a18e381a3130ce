"""Data models for Reelsmith."""

from reelsmith.models.batch import BatchJob, BatchResult, BatchStatus, ProgressEvent
from reelsmith.models.errors import (
    AudioTooShortError,
    ConfigurationError,
    ConflictError,
    ConversionError,
    EmptyPoolError,
    ErrorResponse,
    FilterGraphError,
    InsufficientPoolError,
    MediaProbeError,
    NotFoundError,
    ReelsmithError,
    RenderError,
    ScrapeError,
    SelectionError,
    ThumbnailError,
    ValidationError,
)
from reelsmith.models.graph import FilterChain, FilterGraph, FilterStage
from reelsmith.models.jobs import JobKind, JobState, JobStatus
from reelsmith.models.preset import (
    AudioSpec,
    ClipSpec,
    EndVideos,
    ImageOverlay,
    OutputSettings,
    Preset,
    Segment,
    ShortFormPreset,
    StandardPreset,
    TextOverlay,
    parse_preset,
    parse_resolution,
)
from reelsmith.models.render import RenderInput, RenderJob

__all__ = [
    "AudioSpec",
    "AudioTooShortError",
    "BatchJob",
    "BatchResult",
    "BatchStatus",
    "ClipSpec",
    "ConfigurationError",
    "ConflictError",
    "ConversionError",
    "EmptyPoolError",
    "EndVideos",
    "ErrorResponse",
    "FilterChain",
    "FilterGraph",
    "FilterGraphError",
    "FilterStage",
    "ImageOverlay",
    "InsufficientPoolError",
    "JobKind",
    "JobState",
    "JobStatus",
    "MediaProbeError",
    "NotFoundError",
    "OutputSettings",
    "Preset",
    "ProgressEvent",
    "ReelsmithError",
    "RenderError",
    "RenderInput",
    "RenderJob",
    "ScrapeError",
    "Segment",
    "SelectionError",
    "ShortFormPreset",
    "StandardPreset",
    "TextOverlay",
    "ThumbnailError",
    "ValidationError",
    "parse_preset",
    "parse_resolution",
]
