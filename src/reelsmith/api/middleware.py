"""Error handling middleware."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from reelsmith.models.errors import (
    AudioTooShortError,
    ConfigurationError,
    ConflictError,
    ErrorResponse,
    NotFoundError,
    ReelsmithError,
    RenderError,
    ScrapeError,
    SelectionError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def reelsmith_error_handler(request: Request, exc: ReelsmithError) -> JSONResponse:
    """Handle ReelsmithError exceptions."""
    response = ErrorResponse.from_exception(
        exc, guidance=_get_guidance(exc), retry=_is_retryable(exc)
    )
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=response.model_dump())


def _get_status_code(exc: ReelsmithError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, (ValidationError, ConfigurationError)):
        return 400
    elif isinstance(exc, NotFoundError):
        return 404
    elif isinstance(exc, ConflictError):
        return 409
    elif isinstance(exc, (SelectionError, AudioTooShortError)):
        return 422
    elif isinstance(exc, ScrapeError):
        return 502
    return 500


def _get_guidance(exc: ReelsmithError) -> str:
    """Generate actionable guidance based on error type."""
    if isinstance(exc, ConfigurationError):
        return "Check the preset fields, especially output.resolution (WIDTHxHEIGHT)."
    if isinstance(exc, ConflictError):
        return "Wait for the running job to finish or stop it first."
    if isinstance(exc, SelectionError):
        return "Check that the source folders exist and contain files of the allowed types."
    if isinstance(exc, AudioTooShortError):
        return "Use longer music files or shorten the preset's audio duration."
    if isinstance(exc, RenderError):
        return "Inspect the FFmpeg diagnostics and run the job again."
    return "Please try again."


def _is_retryable(exc: ReelsmithError) -> bool:
    """Determine if the error is retryable."""
    return isinstance(exc, RenderError)
