"""Preset data models.

Presets come in two variants that share only their output settings:

* ``StandardPreset`` assembles segments, end clips and an outro over a random
  music bed and draws text overlays on top.
* ``ShortFormPreset`` takes one source video and flashes two semi-transparent
  overlay images over it.

The variant is decided once, in :func:`parse_preset`.
"""

import re
from typing import Annotated, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from reelsmith.models.errors import ConfigurationError

_RESOLUTION_RE = re.compile(r"^([1-9]\d*)x([1-9]\d*)$")

CENTER = "center"


def parse_resolution(resolution: str | None) -> tuple[int, int]:
    """Parse a ``"<width>x<height>"`` token into positive integers."""
    if not isinstance(resolution, str):
        raise ConfigurationError(
            "Missing output resolution in preset", details={"resolution": repr(resolution)}
        )
    match = _RESOLUTION_RE.match(resolution.strip())
    if not match:
        raise ConfigurationError(
            f"Invalid output resolution: {resolution!r} (expected WIDTHxHEIGHT)",
            details={"resolution": resolution},
        )
    return int(match.group(1)), int(match.group(2))


def _normalize_extensions(extensions: list[str]) -> list[str]:
    normalized = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.append(ext if ext.startswith(".") else f".{ext}")
    return normalized


Extensions = Annotated[list[str], AfterValidator(_normalize_extensions)]


class PresetModel(BaseModel):
    """Base model that reads and writes the camelCase keys of the preset store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Segment(PresetModel):
    """One source directory contributing one input to a composed video."""

    type: Literal["video", "image"]
    source: str = Field(..., min_length=1)
    extensions: Extensions = Field(..., min_length=1)
    duration: float = Field(..., gt=0)


class EndVideos(PresetModel):
    """A run of ``count`` random clips from one directory, each held for ``duration``."""

    source: str = ""
    count: int = Field(default=0, ge=0)
    duration: float = Field(default=0.0, ge=0)
    extensions: Extensions = Field(default_factory=lambda: [".mp4", ".mov"])

    @model_validator(mode="after")
    def validate_enabled(self) -> "EndVideos":
        if self.count > 0 and (not self.source or self.duration <= 0):
            raise ValueError("endVideos with count > 0 needs a source and a positive duration")
        return self


class ClipSpec(PresetModel):
    """A single random clip from one directory, trimmed to ``duration``."""

    source: str = Field(..., min_length=1)
    duration: float = Field(..., gt=0)
    extensions: Extensions = Field(default_factory=lambda: [".mp4", ".mov"])


class AudioSpec(PresetModel):
    """Music bed: a random file from ``source`` cut to ``duration`` seconds."""

    source: str = Field(..., min_length=1)
    duration: float = Field(..., gt=0)
    extensions: Extensions = Field(default_factory=lambda: [".mp3", ".wav"])


class TextOverlay(PresetModel):
    """Time-bounded text drawn over the composed video."""

    text: str
    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., gt=0)
    x: int | float | str = CENTER
    y: int | float | str = CENTER
    font_size: int = Field(default=48, gt=0)
    color: str = "white"
    border_color: str = "black"
    border_width: int = Field(default=0, ge=0)
    box: bool = False
    box_color: str = "black@0.5"
    box_border_width: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_window(self) -> "TextOverlay":
        if self.start_time >= self.end_time:
            raise ValueError(
                f"startTime ({self.start_time}) must be < endTime ({self.end_time})"
            )
        return self


class ImageOverlay(PresetModel):
    """Window during which a random overlay image is composited."""

    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., gt=0)
    opacity: float = Field(default=0.5, ge=0, le=1)
    x: str = "(W-w)/2"
    y: str = "(H-h)/2"

    @model_validator(mode="after")
    def validate_window(self) -> "ImageOverlay":
        if self.start_time >= self.end_time:
            raise ValueError(
                f"startTime ({self.start_time}) must be < endTime ({self.end_time})"
            )
        return self


def default_image_overlays() -> list[ImageOverlay]:
    return [
        ImageOverlay(start_time=1.2, end_time=1.3, opacity=0.5),
        ImageOverlay(start_time=2.7, end_time=2.9, opacity=0.5),
    ]


class OutputSettings(PresetModel):
    """Encoding parameters of the rendered file."""

    resolution: str
    fps: float = Field(default=30.0, gt=0)
    codec: str = "libx264"
    preset: str | None = None
    crf: int | None = Field(default=None, ge=0, le=63)
    video_bitrate: str | None = None
    audio_codec: str = "aac"
    audio_bitrate: str = "192k"
    pixel_format: str = "yuv420p"
    faststart: bool = False

    @field_validator("resolution")
    @classmethod
    def validate_resolution(cls, v: str) -> str:
        try:
            parse_resolution(v)
        except ConfigurationError as e:
            raise ValueError(e.message) from None
        return v.strip()

    @property
    def dimensions(self) -> tuple[int, int]:
        return parse_resolution(self.resolution)


class StandardPreset(PresetModel):
    """Segments + end clips + outro over a music bed, with text overlays."""

    kind: Literal["standard"] = "standard"
    name: str = ""
    description: str = ""
    segments: list[Segment] = Field(default_factory=list)
    end_videos: EndVideos = Field(default_factory=EndVideos)
    outro_video: ClipSpec | None = None
    audio: AudioSpec
    text_overlays: list[TextOverlay] = Field(default_factory=list)
    output: OutputSettings

    @field_validator("outro_video", mode="before")
    @classmethod
    def drop_empty_outro(cls, v):
        if isinstance(v, dict) and not v.get("source"):
            return None
        return v

    @model_validator(mode="after")
    def validate_has_inputs(self) -> "StandardPreset":
        if not self.segments and self.end_videos.count == 0 and self.outro_video is None:
            raise ValueError("Preset needs at least one segment, end video or outro")
        return self

    @property
    def total_duration(self) -> float:
        total = sum(s.duration for s in self.segments)
        total += self.end_videos.count * self.end_videos.duration
        if self.outro_video is not None:
            total += self.outro_video.duration
        return total


class ShortFormSource(PresetModel):
    video: str = Field(..., min_length=1)
    images: str = Field(..., min_length=1)


class ShortFormPreset(PresetModel):
    """One source video with two semi-transparent image flashes."""

    kind: Literal["short_form"] = "short_form"
    name: str = ""
    description: str = ""
    source: ShortFormSource
    overlays: list[ImageOverlay] = Field(
        default_factory=default_image_overlays, min_length=2, max_length=2
    )
    metadata: dict[str, str] = Field(default_factory=dict)
    output: OutputSettings


Preset = Annotated[Union[StandardPreset, ShortFormPreset], Field(discriminator="kind")]

_preset_adapter: TypeAdapter[StandardPreset | ShortFormPreset] = TypeAdapter(Preset)


def infer_kind(data: dict) -> str:
    """Classify an untagged preset record."""
    if data.get("kind"):
        return data["kind"]
    metadata = data.get("metadata") or {}
    if "source" in data or metadata.get("platform") == "none":
        return "short_form"
    return "standard"


def parse_preset(data: dict, name: str | None = None) -> StandardPreset | ShortFormPreset:
    """Validate a raw preset record into its variant.

    Records persisted by older versions wrap the preset body in ``config``;
    both shapes are accepted.
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Preset must be a JSON object", details={"name": name or ""})
    body = dict(data.get("config") or data)
    if name and not body.get("name"):
        body["name"] = name
    if not isinstance(body.get("output"), dict) or not body["output"].get("resolution"):
        raise ConfigurationError(
            "Missing output resolution in preset", details={"name": body.get("name", "")}
        )
    body["kind"] = infer_kind(body)
    try:
        return _preset_adapter.validate_python(body)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid preset '{body.get('name', '')}': {e.error_count()} error(s)",
            details={
                "errors": [
                    {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ]
            },
        ) from e
