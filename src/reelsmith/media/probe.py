"""Media duration probing with ffprobe."""

import asyncio
import json
import logging
from pathlib import Path

from reelsmith.config import get_settings
from reelsmith.models.errors import MediaProbeError

logger = logging.getLogger(__name__)


async def probe_media(file_path: Path, ffprobe_path: str | None = None) -> dict:
    """Run ffprobe on ``file_path`` and return its JSON format/streams data."""
    settings = get_settings()
    file_path = Path(file_path)
    if not file_path.exists():
        raise MediaProbeError(f"File not found: {file_path}", details={"file": str(file_path)})

    cmd = [
        ffprobe_path or settings.ffprobe_path,
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-show_format",
        "-show_streams",
        str(file_path),
    ]
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise MediaProbeError(
            "ffprobe not found. Please install FFmpeg.",
            details={"command": cmd[0]},
        )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=settings.probe_timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise MediaProbeError(
            "File probe timed out, file may be corrupted",
            details={"file": str(file_path)},
        )

    if proc.returncode != 0:
        raise MediaProbeError(
            "File appears to be corrupted or unreadable",
            details={"file": str(file_path), "stderr": stderr.decode(errors="replace")[:500]},
        )
    try:
        return json.loads(stdout.decode(errors="replace"))
    except json.JSONDecodeError:
        raise MediaProbeError(
            "Failed to parse ffprobe output",
            details={"file": str(file_path)},
        )


async def probe_duration(file_path: Path, ffprobe_path: str | None = None) -> float:
    """Return the container duration of ``file_path`` in seconds."""
    probe = await probe_media(file_path, ffprobe_path)
    try:
        duration = float(probe.get("format", {}).get("duration", 0))
    except (TypeError, ValueError):
        duration = 0.0
    if duration <= 0:
        raise MediaProbeError(
            f"Could not determine duration of {file_path}",
            details={"file": str(file_path)},
        )
    logger.debug("Probed %s: %.3fs", file_path, duration)
    return duration
