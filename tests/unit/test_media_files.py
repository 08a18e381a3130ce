"""Tests for directory listing, thumbnails and ffprobe."""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import cv2
import numpy as np
import pytest

from reelsmith.media.listing import list_files, list_subdirectories, safe_child
from reelsmith.media.probe import probe_duration, probe_media
from reelsmith.media.thumbnails import ThumbnailGenerator
from reelsmith.models.errors import MediaProbeError, ThumbnailError, ValidationError
from tests.conftest import make_fake_video


def generate_test_video(path: Path, frames: int = 45, fps: float = 30.0) -> Path:
    """Generate a small test MP4 video."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(str(path), fourcc, fps, (160, 120))
    for i in range(frames):
        frame = np.full((120, 160, 3), (i * 5) % 255, dtype=np.uint8)
        writer.write(frame)
    writer.release()
    return path


class FakeProbeProcess:
    def __init__(self, returncode=0, stdout=b"", stderr=b""):
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self):
        return self._stdout, self._stderr

    async def wait(self):
        return self.returncode

    def kill(self):
        pass


class TestListing:
    def test_list_files_filters(self, tmp_dir):
        for name in ["b.mp4", "a.MP4", "c.txt"]:
            make_fake_video(tmp_dir / name)
        (tmp_dir / "sub").mkdir()
        assert list_files(tmp_dir, [".mp4"]) == ["a.MP4", "b.mp4"]
        assert list_files(tmp_dir) == ["a.MP4", "b.mp4", "c.txt"]

    def test_list_files_missing_dir(self, tmp_dir):
        assert list_files(tmp_dir / "nope") == []

    def test_list_subdirectories(self, tmp_dir):
        for name in ["music", ".git", "editedvideos", "clips"]:
            (tmp_dir / name).mkdir()
        make_fake_video(tmp_dir / "file.mp4")
        assert list_subdirectories(tmp_dir, ignore=["editedvideos"]) == ["clips", "music"]

    @pytest.mark.parametrize("name", ["", ".", "..", "../etc/passwd", "a/b.mp4", "a\\b.mp4"])
    def test_safe_child_rejects(self, tmp_dir, name):
        with pytest.raises(ValidationError):
            safe_child(tmp_dir, name)

    def test_safe_child_accepts_plain_name(self, tmp_dir):
        assert safe_child(tmp_dir, "clip 1.mp4") == tmp_dir / "clip 1.mp4"


class TestThumbnailGenerator:
    def test_creates_and_caches(self, tmp_dir):
        video = generate_test_video(tmp_dir / "user" / "123.mp4")
        generator = ThumbnailGenerator(width=80, height=45, timestamp=0.5)
        thumb = generator.thumbnail(video)
        assert thumb == tmp_dir / "user" / "thumbnails" / "123.jpg"
        image = cv2.imread(str(thumb))
        assert image.shape[:2] == (45, 80)

        mtime = thumb.stat().st_mtime_ns
        assert generator.thumbnail(video) == thumb
        assert thumb.stat().st_mtime_ns == mtime

    def test_timestamp_past_end_uses_first_frame(self, tmp_dir):
        video = generate_test_video(tmp_dir / "short.mp4", frames=5)
        thumb = ThumbnailGenerator(width=32, height=18, timestamp=30.0).thumbnail(video)
        assert thumb.exists()

    def test_unreadable_video(self, tmp_dir):
        bad = make_fake_video(tmp_dir / "bad.mp4")
        with pytest.raises(ThumbnailError) as exc_info:
            ThumbnailGenerator().thumbnail(bad)
        assert isinstance(exc_info.value, MediaProbeError)
        assert exc_info.value.component == "probe"
        assert exc_info.value.details["video"] == str(bad)


class TestProbe:
    def test_probe_duration(self, tmp_dir):
        media = make_fake_video(tmp_dir / "song.mp3")
        payload = json.dumps({"format": {"duration": "12.5"}, "streams": []}).encode()
        with patch(
            "reelsmith.media.probe.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=FakeProbeProcess(stdout=payload),
        ) as mock_exec:
            assert asyncio.run(probe_duration(media, "ffprobe")) == 12.5
        args = mock_exec.call_args.args
        assert args[0] == "ffprobe"
        assert args[-1] == str(media)

    def test_missing_file(self, tmp_dir):
        with pytest.raises(MediaProbeError, match="File not found"):
            asyncio.run(probe_media(tmp_dir / "missing.mp3"))

    def test_nonzero_exit(self, tmp_dir):
        media = make_fake_video(tmp_dir / "bad.mp3")
        with patch(
            "reelsmith.media.probe.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=FakeProbeProcess(returncode=1, stderr=b"Invalid data"),
        ):
            with pytest.raises(MediaProbeError) as exc_info:
                asyncio.run(probe_media(media))
        assert "Invalid data" in exc_info.value.details["stderr"]

    def test_zero_duration(self, tmp_dir):
        media = make_fake_video(tmp_dir / "empty.mp3")
        with patch(
            "reelsmith.media.probe.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=FakeProbeProcess(stdout=b'{"format": {}}'),
        ):
            with pytest.raises(MediaProbeError, match="duration"):
                asyncio.run(probe_duration(media))

    def test_ffprobe_not_installed(self, tmp_dir):
        media = make_fake_video(tmp_dir / "song.mp3")
        with patch(
            "reelsmith.media.probe.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=FileNotFoundError,
        ):
            with pytest.raises(MediaProbeError, match="not found"):
                asyncio.run(probe_media(media))
