"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class ReelsmithError(Exception):
    """Base error for all Reelsmith errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class ConfigurationError(ReelsmithError):
    """Missing or malformed preset fields. Raised before any media I/O."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="config", details=details)


class ValidationError(ReelsmithError):
    """Malformed request input (file names, request bodies)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class ConflictError(ReelsmithError):
    """A job of the same kind is already running."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="jobs", details=details)


class SelectionError(ReelsmithError):
    """Base class for media selection failures."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="selection", details=details)


class NotFoundError(SelectionError):
    """A directory, file or preset does not exist."""


class EmptyPoolError(SelectionError):
    """No file in a directory matches the allowed extensions."""


class InsufficientPoolError(SelectionError):
    """Fewer eligible elements than a draw requires."""


class ConversionError(ReelsmithError):
    """Still image could not be normalized."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="images", details=details)


class MediaProbeError(ReelsmithError):
    """ffprobe could not read a media file."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="probe", details=details)


class ThumbnailError(MediaProbeError):
    """A video frame could not be grabbed or stored as a thumbnail."""


class AudioTooShortError(ReelsmithError):
    """Audio source is shorter than the duration a preset requires."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="audio", details=details)


class FilterGraphError(ReelsmithError):
    """A filter graph violates its labeling invariants."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="filter_graph", details=details)


class RenderError(ReelsmithError):
    """The encoding engine failed."""

    def __init__(self, message: str, diagnostic: str = "", details: dict | None = None):
        details = details or {}
        if diagnostic:
            details.setdefault("stderr", diagnostic)
        super().__init__(message, component="rendering", details=details)
        self.diagnostic = diagnostic


class ScrapeError(ReelsmithError):
    """The scraper could not enumerate or fetch videos."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="scraper", details=details)


class ErrorResponse(BaseModel):
    """Standardized error response for API."""

    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Human-readable error message")
    details: dict = Field(default_factory=dict)
    actionable_guidance: str = Field(default="", description="Suggested user action")
    retry_possible: bool = Field(default=False)

    @classmethod
    def from_exception(
        cls, exc: ReelsmithError, guidance: str = "", retry: bool = False
    ) -> "ErrorResponse":
        return cls(
            error_type=type(exc).__name__,
            component=exc.component,
            message=exc.message,
            details=exc.details,
            actionable_guidance=guidance,
            retry_possible=retry,
        )
