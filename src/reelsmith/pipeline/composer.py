"""Single-video composition for both preset variants."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from reelsmith.config import Settings, get_settings
from reelsmith.media.images import ImageNormalizer
from reelsmith.media.selector import MediaSelector
from reelsmith.models.preset import ShortFormPreset, StandardPreset
from reelsmith.models.render import RenderInput, RenderJob
from reelsmith.rendering.engine import RenderEngine
from reelsmith.rendering.filter_graph import FFmpegFilterGraphBuilder, GraphInput

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def timestamped_name(prefix: str, stem: str | None = None) -> str:
    parts = [prefix, stem, str(time.time_ns())] if stem else [prefix, str(time.time_ns())]
    return "_".join(parts) + ".mp4"


class VideoComposer:
    """Turns a preset into one rendered file.

    Errors are not caught here: selection, conversion, audio and render
    failures all reach the caller unchanged.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        selector: MediaSelector | None = None,
        normalizer: ImageNormalizer | None = None,
        builder: FFmpegFilterGraphBuilder | None = None,
        engine: RenderEngine | None = None,
    ):
        self.settings = settings or get_settings()
        self.selector = selector or MediaSelector()
        self.normalizer = normalizer or ImageNormalizer(
            self.settings.jpeg_quality, self.settings.normalized_suffix
        )
        self.builder = builder or FFmpegFilterGraphBuilder(self.settings.font_file)
        self.engine = engine or RenderEngine(self.settings)

    async def create_video(
        self,
        preset: StandardPreset | ShortFormPreset,
        progress_callback: ProgressCallback | None = None,
    ) -> Path:
        """Render one video from ``preset``."""
        if isinstance(preset, ShortFormPreset):
            return await self.create_short_form_video(preset, progress_callback)
        return await self.create_standard_video(preset, progress_callback)

    async def create_standard_video(
        self, preset: StandardPreset, progress_callback: ProgressCallback | None = None
    ) -> Path:
        width, height = preset.output.dimensions
        logger.info("Creating video with preset '%s'", preset.name)

        inputs: list[RenderInput] = []
        graph_inputs: list[GraphInput] = []
        exclude = [self.normalizer.suffix]

        for segment in preset.segments:
            path = self.selector.select(
                self.settings.resolve(segment.source), segment.extensions, exclude
            )
            if segment.type == "video":
                inputs.append(RenderInput(path=str(path), duration=segment.duration))
                graph_inputs.append(GraphInput(kind="video"))
            else:
                normalized = await asyncio.to_thread(self.normalizer.normalize, path)
                inputs.append(RenderInput(path=str(normalized)))
                graph_inputs.append(GraphInput(kind="image", duration=segment.duration))

        end_videos = preset.end_videos
        for _ in range(end_videos.count):
            path = self.selector.select(
                self.settings.resolve(end_videos.source), end_videos.extensions
            )
            inputs.append(RenderInput(path=str(path), duration=end_videos.duration))
            graph_inputs.append(GraphInput(kind="video"))

        if preset.outro_video is not None:
            outro = preset.outro_video
            path = self.selector.select(self.settings.resolve(outro.source), outro.extensions)
            inputs.append(RenderInput(path=str(path), duration=outro.duration))
            graph_inputs.append(GraphInput(kind="video"))

        audio_file = self.selector.select(
            self.settings.resolve(preset.audio.source), preset.audio.extensions
        )
        audio = await self.engine.prepare_audio(audio_file, preset.audio.duration)

        graph = self.builder.build(graph_inputs, preset.text_overlays, width, height)
        output_dir = self.settings.resolve(self.settings.output_dir)
        job = RenderJob(
            inputs=inputs,
            audio=audio,
            graph=graph,
            output=preset.output,
            output_path=str(output_dir / timestamped_name("output")),
            expected_duration=preset.total_duration,
        )
        logger.info("Creating video at: %s", job.output_path)
        return await self.engine.render(job, progress_callback)

    async def create_short_form_video(
        self, preset: ShortFormPreset, progress_callback: ProgressCallback | None = None
    ) -> Path:
        main_video = self.selector.select(
            self.settings.resolve(preset.source.video), self.settings.video_extensions
        )
        pool = self.overlay_pool(preset)
        output_dir = self.settings.resolve(self.settings.short_form_output_dir)
        output_path, _ = await self.render_short_form(
            main_video, pool, preset, output_dir / timestamped_name("tiktok"), progress_callback
        )
        return output_path

    def overlay_pool(self, preset: ShortFormPreset) -> list[Path]:
        """Eligible overlay images, excluding previously normalized copies."""
        return self.selector.list_media(
            self.settings.resolve(preset.source.images),
            self.settings.image_extensions,
            exclude_suffixes=[self.normalizer.suffix],
        )

    async def render_short_form(
        self,
        source_video: Path,
        image_pool: Sequence[Path],
        preset: ShortFormPreset,
        output_path: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> tuple[Path, list[Path]]:
        """Composite two distinct random overlay images onto ``source_video``.

        Returns the output path and the overlay images that were drawn.
        """
        width, height = preset.output.dimensions
        picks = list(self.selector.select_two_distinct(image_pool))
        normalized = [await asyncio.to_thread(self.normalizer.normalize, p) for p in picks]

        inputs = [RenderInput(path=str(source_video))]
        graph_inputs = [GraphInput(kind="video")]
        for image, window in zip(normalized, preset.overlays):
            inputs.append(RenderInput(path=str(image)))
            graph_inputs.append(
                GraphInput(
                    kind="overlay_image",
                    start_time=window.start_time,
                    end_time=window.end_time,
                    opacity=window.opacity,
                    x=window.x,
                    y=window.y,
                )
            )

        graph = self.builder.build(graph_inputs, [], width, height)
        job = RenderJob(
            inputs=inputs,
            graph=graph,
            audio_map="0:a?",
            output=preset.output,
            output_path=str(output_path),
        )
        rendered = await self.engine.render(job, progress_callback)
        return rendered, picks
