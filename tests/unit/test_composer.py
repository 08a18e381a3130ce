"""Tests for single-video composition."""

import asyncio
import random
from pathlib import Path

import pytest

from reelsmith.media.images import ImageNormalizer
from reelsmith.media.selector import MediaSelector
from reelsmith.models.errors import AudioTooShortError, EmptyPoolError, NotFoundError
from reelsmith.models.preset import parse_preset
from reelsmith.models.render import RenderInput
from reelsmith.pipeline.composer import VideoComposer, timestamped_name
from reelsmith.rendering.engine import select_audio_window
from reelsmith.rendering.filter_graph import FINAL_LABEL, FFmpegFilterGraphBuilder
from tests.conftest import make_fake_video, make_image


class FakeEngine:
    """Captures render jobs instead of running ffmpeg."""

    def __init__(self, audio_total=60.0, rng=None):
        self.audio_total = audio_total
        self.rng = rng or random.Random(0)
        self.jobs = []

    async def prepare_audio(self, audio_path, required_duration):
        start = select_audio_window(self.audio_total, required_duration, self.rng)
        return RenderInput(path=str(audio_path), start=round(start, 3), duration=required_duration)

    async def render(self, job, progress_callback=None):
        self.jobs.append(job)
        return job.output_file


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def composer(settings, engine):
    return VideoComposer(
        settings,
        selector=MediaSelector(random.Random(11)),
        normalizer=ImageNormalizer(quality=90, suffix="_converted.jpg"),
        builder=FFmpegFilterGraphBuilder(font_file=None),
        engine=engine,
    )


@pytest.fixture
def standard_media(tmp_dir):
    for i in range(3):
        make_fake_video(tmp_dir / "clips" / f"clip{i}.mp4")
    make_fake_video(tmp_dir / "outro" / "outro.mp4")
    make_fake_video(tmp_dir / "music" / "song.mp3")
    make_image(tmp_dir / "stills" / "still.png")
    return tmp_dir


def test_timestamped_name():
    name = timestamped_name("tiktok", "clip")
    assert name.startswith("tiktok_clip_")
    assert name.endswith(".mp4")
    assert timestamped_name("output").count("_") == 1


class TestStandardVideo:
    def test_builds_job(self, composer, engine, standard_media, standard_config, settings):
        preset = parse_preset(standard_config)
        output = asyncio.run(composer.create_video(preset))

        job = engine.jobs[0]
        assert output == job.output_file
        assert output.parent == settings.resolve(settings.output_dir)
        assert output.name.startswith("output_")
        assert [i.duration for i in job.inputs] == [2.0, 1.5, 1.0]
        assert Path(job.inputs[2].path).parent.name == "outro"
        assert job.audio.duration == 4.5
        assert job.audio_map == "3:a"
        assert job.expected_duration == pytest.approx(4.5)
        assert job.graph.final_label == FINAL_LABEL
        assert len(job.graph.chains_with("drawtext")) == 2

    def test_image_segments_normalized(
        self, composer, engine, standard_media, standard_config
    ):
        standard_config["segments"].append(
            {"type": "image", "source": "stills", "duration": 0.7, "extensions": [".png"]}
        )
        asyncio.run(composer.create_video(parse_preset(standard_config)))
        job = engine.jobs[0]
        still = job.inputs[2]
        assert still.path.endswith("still_converted.jpg")
        assert still.duration is None
        assert Path(still.path).exists()
        chain = job.graph.chains[2]
        assert chain.operations[:2] == ["loop", "trim"]

    def test_end_videos_repeat(self, composer, engine, standard_media, standard_config):
        standard_config["endVideos"] = {
            "source": "clips",
            "count": 3,
            "duration": 0.3778,
            "extensions": [".mp4"],
        }
        asyncio.run(composer.create_video(parse_preset(standard_config)))
        job = engine.jobs[0]
        assert len(job.inputs) == 6
        assert [i.duration for i in job.inputs[2:5]] == [0.3778] * 3
        assert job.graph.chains_with("concat")[0].stages[0].param("n") == 6

    def test_missing_source_propagates(self, composer, tmp_dir, standard_config):
        with pytest.raises(NotFoundError):
            asyncio.run(composer.create_video(parse_preset(standard_config)))

    def test_empty_source_propagates(self, composer, standard_media, standard_config):
        standard_config["segments"][0]["extensions"] = [".mkv"]
        with pytest.raises(EmptyPoolError):
            asyncio.run(composer.create_video(parse_preset(standard_config)))

    def test_audio_too_short_propagates(self, settings, standard_media, standard_config):
        engine = FakeEngine(audio_total=2.0)
        composer = VideoComposer(settings, builder=FFmpegFilterGraphBuilder(None), engine=engine)
        with pytest.raises(AudioTooShortError):
            asyncio.run(composer.create_video(parse_preset(standard_config)))
        assert engine.jobs == []


class TestShortFormVideo:
    def test_render_short_form(self, composer, engine, short_form_preset, overlay_dir, tmp_dir):
        video = make_fake_video(tmp_dir / "tiktokvideos" / "123.mp4")
        pool = composer.overlay_pool(short_form_preset)
        output, picks = asyncio.run(
            composer.render_short_form(video, pool, short_form_preset, tmp_dir / "out.mp4")
        )

        assert output == tmp_dir / "out.mp4"
        assert len(set(picks)) == 2
        job = engine.jobs[0]
        assert job.inputs[0].path == str(video)
        assert all(i.path.endswith("_converted.jpg") for i in job.inputs[1:])
        assert job.audio is None
        assert job.audio_map == "0:a?"
        assert job.graph.final_label == FINAL_LABEL
        mixers = [c.stages[-1].param("aa") for c in job.graph.chains_with("colorchannelmixer")]
        assert mixers == [0.5, 0.5]

    def test_overlay_pool_skips_normalized(self, composer, short_form_preset, overlay_dir):
        make_image(overlay_dir / "overlay_0_converted.jpg")
        pool = composer.overlay_pool(short_form_preset)
        assert [p.name for p in pool] == ["overlay_0.png", "overlay_1.png", "overlay_2.png"]

    def test_create_short_form_video(
        self, composer, engine, short_form_preset, overlay_dir, source_videos, settings
    ):
        output = asyncio.run(composer.create_video(short_form_preset))
        assert output.parent == settings.resolve(settings.short_form_output_dir)
        assert output.name.startswith("tiktok_")
        assert Path(engine.jobs[0].inputs[0].path) in source_videos
