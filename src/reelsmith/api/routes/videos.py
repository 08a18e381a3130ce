"""Video creation and batch control endpoints."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from reelsmith.api.dependencies import (
    get_app_settings,
    get_batch_controller,
    get_broadcaster,
    get_composer,
    get_job_registry,
    get_preset_store,
)
from reelsmith.api.progress import ProgressBroadcaster
from reelsmith.config import Settings
from reelsmith.media.listing import list_files, safe_child
from reelsmith.models.batch import ProgressEvent
from reelsmith.models.errors import ConflictError, NotFoundError
from reelsmith.models.jobs import JobKind, JobStatus
from reelsmith.models.preset import ShortFormPreset
from reelsmith.pipeline.batch import BatchController
from reelsmith.pipeline.composer import VideoComposer
from reelsmith.pipeline.registry import JobRegistry
from reelsmith.storage.preset_store import PresetStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["videos"])


class CreateVideoRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    preset_name: str = Field(..., min_length=1)
    tiktok_user: str | None = None
    selected_files: list[str] = Field(default_factory=list)


@router.post("/create-video")
async def create_video(
    request: CreateVideoRequest,
    settings: Settings = Depends(get_app_settings),
    store: PresetStore = Depends(get_preset_store),
    registry: JobRegistry = Depends(get_job_registry),
    broadcaster: ProgressBroadcaster = Depends(get_broadcaster),
    composer: VideoComposer = Depends(get_composer),
    controller: BatchController = Depends(get_batch_controller),
):
    """Render one standard video, or batch-process a folder for short-form presets."""
    preset = store.get(request.preset_name)
    if preset is None:
        raise NotFoundError(
            f"Preset '{request.preset_name}' not found", details={"name": request.preset_name}
        )

    if not isinstance(preset, ShortFormPreset):
        job = registry.create(JobKind.VIDEO)
        try:
            output_path = await composer.create_video(preset)
        except Exception as e:
            registry.finish(job.job_id, JobStatus.FAILED, str(e))
            raise
        registry.finish(job.job_id, JobStatus.COMPLETE, str(output_path))
        return {
            "success": True,
            "jobId": job.job_id,
            "message": "Video created successfully",
            "files": [str(output_path)],
        }

    source_dir = settings.resolve(preset.source.video)
    if request.tiktok_user:
        source_dir = safe_child(settings.resolve(settings.downloads_dir), request.tiktok_user)
    videos = _source_videos(source_dir, request.selected_files, settings)

    running = registry.active(JobKind.BATCH)
    if running:
        raise ConflictError(
            "A batch is already running", details={"job_id": running[0].job_id}
        )
    job = registry.create(JobKind.BATCH)

    async def on_progress(event: ProgressEvent) -> None:
        await broadcaster.broadcast({"type": "batch", **event.model_dump(mode="json")})

    try:
        result = await controller.run(
            videos, preset, on_progress=on_progress, should_cancel=registry.cancel_check(job.job_id)
        )
    except Exception as e:
        registry.finish(job.job_id, JobStatus.FAILED, str(e))
        raise

    message = f"Processed {len(result.outputs)} of {len(videos)} videos"
    if result.cancelled:
        message += " (stopped)"
    registry.finish(job.job_id, JobStatus.COMPLETE, message)
    logger.info("Batch job %s: %s", job.job_id, message)
    return {
        "success": True,
        "jobId": job.job_id,
        "message": message,
        "files": result.outputs,
        "failed": [{"file": Path(j.source_video).name, "error": j.error} for j in result.failures],
        "cancelled": result.cancelled,
    }


def _source_videos(source_dir: Path, selected: list[str], settings: Settings) -> list[Path]:
    if selected:
        return [safe_child(source_dir, name) for name in selected]
    return [source_dir / name for name in list_files(source_dir, settings.video_extensions)]


@router.post("/api/stop-batch")
async def stop_batch(registry: JobRegistry = Depends(get_job_registry)):
    """Stop running batches after their current item."""
    stopped = registry.cancel_all(JobKind.BATCH)
    return {"success": True, "stopped": stopped, "message": "Stopping batch processing..."}


@router.get("/api/jobs")
async def list_jobs(registry: JobRegistry = Depends(get_job_registry)):
    """Jobs that are still running."""
    return [state.model_dump(mode="json") for state in registry.active()]


@router.get("/api/jobs/{job_id}")
async def get_job(job_id: str, registry: JobRegistry = Depends(get_job_registry)):
    state = registry.get(job_id)
    if state is None:
        raise NotFoundError(f"Job {job_id} not found", details={"job_id": job_id})
    return state.model_dump(mode="json")
