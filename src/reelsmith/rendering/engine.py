"""Rendering engine: runs one encode job through FFmpeg."""

import asyncio
import logging
import random
from collections import deque
from collections.abc import Callable
from pathlib import Path

from reelsmith.config import Settings, get_settings
from reelsmith.media.probe import probe_duration
from reelsmith.models.errors import AudioTooShortError, RenderError
from reelsmith.models.render import RenderInput, RenderJob
from reelsmith.rendering.progress import FFmpegProgressMonitor

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 30


def select_audio_window(
    total_duration: float, required_duration: float, rng: random.Random
) -> float:
    """Pick a start offset so that ``required_duration`` seconds fit in the file.

    The offset is uniform over ``[0, total - required]``.
    """
    if total_duration < required_duration:
        raise AudioTooShortError(
            f"Audio too short ({total_duration:.2f}s < {required_duration:.2f}s)",
            details={"duration": total_duration, "required": required_duration},
        )
    return rng.uniform(0.0, total_duration - required_duration)


class RenderEngine:
    """Builds and runs FFmpeg commands for :class:`RenderJob` instances."""

    def __init__(self, settings: Settings | None = None, rng: random.Random | None = None):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()

    async def prepare_audio(self, audio_path: Path, required_duration: float) -> RenderInput:
        """Probe ``audio_path`` and choose a random window of ``required_duration``."""
        total = await probe_duration(audio_path, self.settings.ffprobe_path)
        try:
            start = select_audio_window(total, required_duration, self.rng)
        except AudioTooShortError as e:
            raise AudioTooShortError(
                f"{e.message}: {audio_path}", details={**e.details, "audio": str(audio_path)}
            ) from e
        logger.debug("Audio window %s: %.3fs + %.3fs", audio_path, start, required_duration)
        return RenderInput(path=str(audio_path), start=round(start, 3), duration=required_duration)

    def build_ffmpeg_command(self, job: RenderJob) -> list[str]:
        """Build the complete FFmpeg command."""
        out = job.output
        cmd = [self.settings.ffmpeg_path, "-y", "-hide_banner", "-nostdin"]

        for inp in [*job.inputs, *([job.audio] if job.audio else [])]:
            if inp.start is not None:
                cmd.extend(["-ss", f"{inp.start:.3f}"])
            if inp.duration is not None:
                cmd.extend(["-t", f"{inp.duration:g}"])
            cmd.extend(["-i", inp.path])

        cmd.extend(["-filter_complex", job.graph.render()])
        cmd.extend(["-map", f"[{job.graph.final_label}]"])
        if job.audio_map:
            cmd.extend(["-map", job.audio_map])

        cmd.extend(["-c:v", out.codec])
        if out.preset:
            cmd.extend(["-preset", out.preset])
        if out.crf is not None:
            cmd.extend(["-crf", str(out.crf)])
        if out.video_bitrate:
            cmd.extend(["-b:v", out.video_bitrate])
        cmd.extend(["-r", f"{out.fps:g}", "-pix_fmt", out.pixel_format])

        if job.audio_map:
            cmd.extend(["-c:a", out.audio_codec, "-b:a", out.audio_bitrate])
        if job.audio is not None:
            cmd.append("-shortest")
        if out.faststart:
            cmd.extend(["-movflags", "+faststart"])

        cmd.extend(["-progress", "pipe:1", "-nostats", job.output_path])
        return cmd

    async def render(
        self,
        job: RenderJob,
        progress_callback: Callable[[float], None] | None = None,
    ) -> Path:
        """Run the encoder and wait for it; return the output path."""
        output_path = job.output_file
        output_path.parent.mkdir(parents=True, exist_ok=True)

        cmd = self.build_ffmpeg_command(job)
        logger.debug("FFmpeg command: %s", " ".join(cmd))
        monitor = FFmpegProgressMonitor(job.expected_duration, progress_callback)
        stderr_lines: deque[str] = deque(maxlen=STDERR_TAIL_LINES)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise RenderError(
                "FFmpeg not found. Please install FFmpeg.",
                details={"command": cmd[0]},
            )

        try:
            await asyncio.gather(
                _pump(process.stdout, monitor.parse_line),
                _pump(process.stderr, stderr_lines.append),
            )
            returncode = await process.wait()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if returncode != 0:
            diagnostic = "".join(stderr_lines)
            logger.error("FFmpeg failed (code %d) for %s:\n%s", returncode, output_path, diagnostic)
            raise RenderError(
                f"FFmpeg exited with code {returncode}",
                diagnostic=diagnostic,
                details={"output": str(output_path)},
            )
        if not output_path.exists():
            raise RenderError(
                "Output file was not created", details={"output": str(output_path)}
            )

        monitor.finish()
        logger.info("Rendered %s", output_path)
        return output_path


async def _pump(stream: asyncio.StreamReader | None, sink: Callable[[str], object]) -> None:
    if stream is None:
        return
    async for raw_line in stream:
        sink(raw_line.decode("utf-8", errors="replace"))
