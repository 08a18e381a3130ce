"""Scraper endpoints."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from reelsmith.api.dependencies import (
    get_app_settings,
    get_broadcaster,
    get_job_registry,
    get_scraper,
)
from reelsmith.api.progress import ProgressBroadcaster
from reelsmith.config import Settings
from reelsmith.models.errors import ReelsmithError
from reelsmith.models.jobs import JobKind, JobStatus
from reelsmith.pipeline.registry import JobRegistry
from reelsmith.scraper.tiktok import TikTokScraper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scraper"])


class ScrapeRequest(BaseModel):
    username: str = Field(..., min_length=1)


@router.post("/scrape-tiktok")
async def scrape_user(
    request: ScrapeRequest,
    settings: Settings = Depends(get_app_settings),
    registry: JobRegistry = Depends(get_job_registry),
    broadcaster: ProgressBroadcaster = Depends(get_broadcaster),
    scraper: TikTokScraper = Depends(get_scraper),
):
    """Download all videos of a user; progress is broadcast over WebSocket."""
    job = registry.create(JobKind.SCRAPE)

    async def on_progress(payload: dict) -> None:
        await broadcaster.broadcast({"type": "scraper", **payload})

    try:
        files = await scraper.scrape_user(
            request.username,
            settings.resolve(settings.downloads_dir),
            on_progress=on_progress,
            should_cancel=registry.cancel_check(job.job_id),
        )
    except ReelsmithError as e:
        registry.finish(job.job_id, JobStatus.FAILED, e.message)
        raise
    except Exception as e:
        registry.finish(job.job_id, JobStatus.FAILED, str(e))
        raise
    registry.finish(job.job_id, JobStatus.COMPLETE, f"Downloaded {len(files)} videos")
    logger.info("Scrape job %s finished with %d files", job.job_id, len(files))

    return {
        "success": True,
        "jobId": job.job_id,
        "message": f"Downloaded {len(files)} videos",
        "files": [str(f) for f in files],
    }


@router.post("/stop-scrape")
async def stop_scrape(registry: JobRegistry = Depends(get_job_registry)):
    """Ask every running scraper to stop before its next download."""
    stopped = registry.cancel_all(JobKind.SCRAPE)
    return {"success": True, "stopped": stopped, "message": "Stopping all active downloads..."}
