"""Shared test fixtures and test media generators."""

import random
import tempfile
from pathlib import Path

import pytest
from PIL import Image

from reelsmith.config import Settings
from reelsmith.models.preset import parse_preset
from reelsmith.storage.defaults import DEFAULT_PRESETS


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def settings(tmp_dir):
    """Settings rooted at the temporary directory."""
    return Settings(
        media_root=tmp_dir,
        presets_file=tmp_dir / "video-presets.json",
        scraper_download_delay=0,
    )


@pytest.fixture
def rng():
    return random.Random(1234)


def make_image(path: Path, size=(64, 48), mode="RGB", color=(200, 30, 30), fmt=None) -> Path:
    """Write a small solid-color image."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if mode in ("RGBA", "LA") and isinstance(color, tuple) and len(color) == 3:
        color = (*color, 128)
    Image.new(mode, size, color).save(path, fmt)
    return path


def make_fake_video(path: Path) -> Path:
    """Write a placeholder file with a video extension."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


@pytest.fixture
def overlay_dir(tmp_dir):
    """Directory with three overlay images."""
    d = tmp_dir / "tiktokimages"
    for i in range(3):
        make_image(d / f"overlay_{i}.png", color=(i * 60, 100, 200))
    return d


@pytest.fixture
def source_videos(tmp_dir):
    """Five fake source videos."""
    d = tmp_dir / "tiktokvideos"
    return [make_fake_video(d / f"clip_{i}.mp4") for i in range(1, 6)]


@pytest.fixture
def short_form_preset():
    return parse_preset(DEFAULT_PRESETS["tiktok_iphone13_europe"])


@pytest.fixture
def standard_preset():
    return parse_preset(DEFAULT_PRESETS["VideoEdit 1"])


@pytest.fixture
def standard_config():
    """Small standard preset: two segments, no end videos, an outro, two texts."""
    return {
        "name": "e2e",
        "segments": [
            {"type": "video", "source": "clips", "duration": 2.0, "extensions": [".mp4"]},
            {"type": "video", "source": "clips", "duration": 1.5, "extensions": [".mp4"]},
        ],
        "endVideos": {"count": 0},
        "outroVideo": {"source": "outro", "duration": 1.0},
        "audio": {"source": "music", "duration": 4.5},
        "textOverlays": [
            {"text": "A", "startTime": 0, "endTime": 1},
            {"text": "B", "startTime": 1, "endTime": 2},
        ],
        "output": {"resolution": "640x360", "fps": 25, "crf": 23, "preset": "fast"},
    }
