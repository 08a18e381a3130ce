"""Sequential batch processing of source videos."""

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from reelsmith.config import Settings, get_settings
from reelsmith.models.batch import BatchJob, BatchResult, BatchStatus, ProgressEvent
from reelsmith.models.errors import EmptyPoolError, InsufficientPoolError, ReelsmithError
from reelsmith.models.preset import ShortFormPreset
from reelsmith.pipeline.composer import VideoComposer, timestamped_name

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], Awaitable[None] | None]
CancelCheck = Callable[[], bool]


class BatchController:
    """Runs one short-form render per source video, strictly one at a time.

    A failing item is recorded and reported, and the batch moves on. Only an
    empty input list or an overlay pool with fewer than two images fails the
    batch, and both are checked before the first item starts.
    """

    def __init__(self, composer: VideoComposer | None = None, settings: Settings | None = None):
        self.settings = settings or (composer.settings if composer else get_settings())
        self.composer = composer or VideoComposer(self.settings)

    async def run_batch(
        self,
        source_videos: Sequence[Path],
        preset: ShortFormPreset,
        on_progress: ProgressSink | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> list[Path]:
        """Process every source video and return the paths that rendered."""
        result = await self.run(source_videos, preset, on_progress, should_cancel)
        return [Path(p) for p in result.outputs]

    async def run(
        self,
        source_videos: Sequence[Path],
        preset: ShortFormPreset,
        on_progress: ProgressSink | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> BatchResult:
        """Process every source video and return the per-item record."""
        if not source_videos:
            raise EmptyPoolError("No videos found to process")

        pool = self.composer.overlay_pool(preset)
        if len(pool) < 2:
            raise InsufficientPoolError(
                "Need at least 2 different images in the overlay directory",
                details={"directory": preset.source.images, "pool_size": len(pool)},
            )

        output_dir = self.settings.resolve(self.settings.short_form_output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        total = len(source_videos)
        result = BatchResult()
        logger.info("Processing %d videos with preset '%s'", total, preset.name)

        for index, video in enumerate(source_videos, start=1):
            if should_cancel is not None and should_cancel():
                logger.info("Batch cancelled before item %d/%d", index, total)
                result.cancelled = True
                break

            video = Path(video)
            job = BatchJob(index=index, source_video=str(video), started_at=datetime.now(UTC))
            result.jobs.append(job)
            await self._emit(on_progress, job, total)

            try:
                output_path, overlays = await self.composer.render_short_form(
                    video,
                    pool,
                    preset,
                    output_dir / timestamped_name("tiktok", video.stem),
                )
            except ReelsmithError as e:
                self._fail(job, e.message)
                logger.error("Error processing %s, continuing with next: %s", video, e.message)
            except Exception as e:
                self._fail(job, str(e))
                logger.exception("Unexpected error processing %s, continuing with next", video)
            else:
                job.status = BatchStatus.COMPLETED
                job.output_path = str(output_path)
                job.overlay_images = [str(p) for p in overlays]
                job.finished_at = datetime.now(UTC)
                logger.info("Successfully processed: %s", output_path)

            await self._emit(on_progress, job, total)

        logger.info(
            "Finished batch: %d processed, %d failed", len(result.outputs), len(result.failures)
        )
        return result

    @staticmethod
    def _fail(job: BatchJob, message: str) -> None:
        job.status = BatchStatus.ERROR
        job.error = message
        job.finished_at = datetime.now(UTC)

    @staticmethod
    async def _emit(on_progress: ProgressSink | None, job: BatchJob, total: int) -> None:
        if on_progress is None:
            return
        event = ProgressEvent(
            current=job.index,
            total=total,
            file=Path(job.source_video).name,
            status=job.status,
            error=job.error,
            output_path=job.output_path,
        )
        maybe_awaitable = on_progress(event)
        if inspect.isawaitable(maybe_awaitable):
            await maybe_awaitable
