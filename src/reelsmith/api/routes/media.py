"""Overlay image management, folder listing and thumbnails."""

import asyncio
import logging
import shutil
import time

from fastapi import APIRouter, Depends, UploadFile
from fastapi.responses import FileResponse

from reelsmith.api.dependencies import get_app_settings, get_thumbnailer
from reelsmith.config import Settings
from reelsmith.media.listing import list_files, list_subdirectories, safe_child
from reelsmith.media.thumbnails import ThumbnailGenerator
from reelsmith.models.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])


@router.get("/images")
async def list_images(settings: Settings = Depends(get_app_settings)):
    """Overlay images available to short-form presets."""
    return list_files(settings.resolve(settings.overlay_images_dir), settings.gallery_extensions)


@router.post("/upload-image")
async def upload_image(image: UploadFile, settings: Settings = Depends(get_app_settings)):
    """Store an uploaded overlay image as ``<ms-timestamp>-<name>``."""
    if not image.filename:
        raise ValidationError("No file uploaded")
    image_dir = settings.resolve(settings.overlay_images_dir)
    image_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{time.time_ns() // 1_000_000}-{image.filename}"
    target = safe_child(image_dir, filename)

    with open(target, "wb") as f:
        shutil.copyfileobj(image.file, f)

    logger.info("Uploaded overlay image %s", filename)
    return {"success": True, "filename": filename}


@router.delete("/images/{filename}")
async def delete_image(filename: str, settings: Settings = Depends(get_app_settings)):
    path = safe_child(settings.resolve(settings.overlay_images_dir), filename)
    if not path.is_file():
        raise NotFoundError("File not found", details={"filename": filename})
    path.unlink()
    return {"success": True}


@router.get("/list-folders")
async def list_folders(settings: Settings = Depends(get_app_settings)):
    """Media folders under the media root that presets can point at."""
    return list_subdirectories(settings.media_root, ignore=settings.ignored_folders)


@router.get("/list-tiktok-users")
async def list_users(settings: Settings = Depends(get_app_settings)):
    """Users that have a download folder."""
    return list_subdirectories(settings.resolve(settings.downloads_dir), ignore=["thumbnails"])


@router.get("/list-videos/{username}")
async def list_videos(username: str, settings: Settings = Depends(get_app_settings)):
    user_dir = safe_child(settings.resolve(settings.downloads_dir), username)
    return list_files(user_dir, [".mp4"])


@router.get("/thumbnail/{username}/{filename}")
async def get_thumbnail(
    username: str,
    filename: str,
    settings: Settings = Depends(get_app_settings),
    thumbnailer: ThumbnailGenerator = Depends(get_thumbnailer),
):
    user_dir = safe_child(settings.resolve(settings.downloads_dir), username)
    video_path = safe_child(user_dir, filename)
    if not video_path.is_file():
        raise NotFoundError("Video not found", details={"filename": filename})
    thumb_path = await asyncio.to_thread(thumbnailer.thumbnail, video_path)
    return FileResponse(path=thumb_path, media_type="image/jpeg")
