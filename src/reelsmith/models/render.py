"""Render job data models."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from reelsmith.models.graph import FilterGraph
from reelsmith.models.preset import OutputSettings


class RenderInput(BaseModel):
    """One ``-i`` input with its optional seek/duration options."""

    path: str = Field(..., min_length=1)
    start: float | None = Field(default=None, ge=0, description="Input seek (-ss)")
    duration: float | None = Field(default=None, gt=0, description="Input duration (-t)")


class RenderJob(BaseModel):
    """Everything the encoder needs to produce one output file."""

    inputs: list[RenderInput] = Field(..., min_length=1)
    audio: RenderInput | None = Field(default=None, description="Dedicated audio input")
    graph: FilterGraph
    audio_map: str | None = Field(default=None, description="Stream specifier for -map")
    output: OutputSettings
    output_path: str = Field(..., min_length=1)
    expected_duration: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def default_audio_map(self) -> "RenderJob":
        # The dedicated audio input always follows the media inputs.
        if self.audio is not None and self.audio_map is None:
            self.audio_map = f"{len(self.inputs)}:a"
        return self

    @property
    def output_file(self) -> Path:
        return Path(self.output_path)
