"""Dependency injection providers for FastAPI."""

from datetime import timedelta
from functools import lru_cache

from reelsmith.api.progress import ProgressBroadcaster
from reelsmith.config import Settings, get_settings
from reelsmith.media.thumbnails import ThumbnailGenerator
from reelsmith.pipeline.batch import BatchController
from reelsmith.pipeline.composer import VideoComposer
from reelsmith.pipeline.registry import JobRegistry
from reelsmith.scraper.tiktok import TikTokScraper
from reelsmith.storage.preset_store import PresetStore


@lru_cache
def get_preset_store() -> PresetStore:
    return PresetStore()


@lru_cache
def get_job_registry() -> JobRegistry:
    return JobRegistry(timedelta(seconds=get_settings().job_retention))


@lru_cache
def get_broadcaster() -> ProgressBroadcaster:
    return ProgressBroadcaster()


@lru_cache
def get_composer() -> VideoComposer:
    return VideoComposer()


def get_batch_controller() -> BatchController:
    return BatchController(get_composer())


def get_scraper() -> TikTokScraper:
    return TikTokScraper()


def get_thumbnailer() -> ThumbnailGenerator:
    return ThumbnailGenerator()


def get_app_settings() -> Settings:
    return get_settings()
