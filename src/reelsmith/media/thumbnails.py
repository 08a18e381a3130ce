"""Video thumbnails using OpenCV."""

import logging
from pathlib import Path

import cv2

from reelsmith.config import get_settings
from reelsmith.models.errors import ThumbnailError

logger = logging.getLogger(__name__)


class ThumbnailGenerator:
    """Grabs one frame of a video and stores it as a small JPEG."""

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        timestamp: float | None = None,
    ):
        settings = get_settings()
        self.width = width or settings.thumbnail_width
        self.height = height or settings.thumbnail_height
        self.timestamp = settings.thumbnail_timestamp if timestamp is None else timestamp

    def thumbnail_path(self, video_path: Path) -> Path:
        video_path = Path(video_path)
        return video_path.parent / "thumbnails" / f"{video_path.stem}.jpg"

    def thumbnail(self, video_path: Path) -> Path:
        """Return the cached thumbnail of ``video_path``, creating it if needed."""
        video_path = Path(video_path)
        thumb_path = self.thumbnail_path(video_path)
        if thumb_path.exists():
            return thumb_path

        cap = cv2.VideoCapture(str(video_path))
        if not cap.isOpened():
            raise ThumbnailError(
                f"Cannot open video: {video_path}", details={"video": str(video_path)}
            )
        try:
            cap.set(cv2.CAP_PROP_POS_MSEC, self.timestamp * 1000)
            ret, frame = cap.read()
            if not ret:
                # Clip shorter than the timestamp
                cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
                ret, frame = cap.read()
            if not ret:
                raise ThumbnailError(
                    f"No frames could be read from {video_path}",
                    details={"video": str(video_path)},
                )
        finally:
            cap.release()

        frame = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_AREA)
        thumb_path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(thumb_path), frame):
            raise ThumbnailError(
                f"Failed to write thumbnail {thumb_path}", details={"thumbnail": str(thumb_path)}
            )
        logger.info("Created thumbnail %s", thumb_path)
        return thumb_path
