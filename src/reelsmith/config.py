"""Application configuration using Pydantic BaseSettings."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Reelsmith configuration loaded from environment variables."""

    model_config = {"env_prefix": "REELSMITH_", "env_file": ".env", "extra": "ignore"}

    # External tools
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    probe_timeout: float = 30.0

    # Directories (relative paths resolve against media_root)
    media_root: Path = Path(".")
    presets_file: Path = Path("video-presets.json")
    output_dir: Path = Path("editedvideos")
    short_form_output_dir: Path = Path("editedtiktok")
    downloads_dir: Path = Path("tiktokvideos")
    overlay_images_dir: Path = Path("tiktokimages")
    ignored_folders: list[str] = ["public", "editedvideos", "editedtiktok", "__pycache__"]

    # Media pools
    video_extensions: list[str] = [".mp4", ".mov"]
    image_extensions: list[str] = [".jpg", ".jpeg", ".png"]
    gallery_extensions: list[str] = [".jpg", ".jpeg", ".png", ".gif", ".webp"]
    audio_extensions: list[str] = [".mp3", ".wav"]

    # Image normalization
    normalized_suffix: str = "_converted.jpg"
    jpeg_quality: int = 90

    # Rendering
    font_file: Path | None = None

    # Thumbnails
    thumbnail_width: int = 320
    thumbnail_height: int = 180
    thumbnail_timestamp: float = 1.0

    # Scraper
    scraper_api_url: str = "https://www.tikwm.com/api/"
    scraper_profile_url: str = "https://www.tiktok.com/@{username}"
    scraper_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    scraper_headless: bool = True
    scraper_navigation_timeout: float = 60.0
    scraper_download_delay: float = 0.5

    # Web UI served at / when present
    static_dir: Path = Path("public")

    # Server
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 3000

    # Finished jobs are forgotten after this many seconds
    job_retention: float = 3600.0

    def resolve(self, path: Path | str) -> Path:
        """Resolve a configured path against the media root."""
        path = Path(path)
        if path.is_absolute():
            return path
        return self.media_root / path


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
