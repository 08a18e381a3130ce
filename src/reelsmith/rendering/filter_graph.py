"""FFmpeg filter graph construction."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from reelsmith.config import get_settings
from reelsmith.models.errors import FilterGraphError
from reelsmith.models.graph import FilterGraph, FilterStage, format_value
from reelsmith.models.preset import CENTER, TextOverlay

logger = logging.getLogger(__name__)

FINAL_LABEL = "vout"
CONCAT_LABEL = "concat"


class GraphInput(BaseModel):
    """One decoder input as seen by the graph builder.

    ``video`` and ``image`` inputs are concatenated in order; ``overlay_image``
    inputs are composited over the concatenated stream during their window.
    """

    kind: Literal["video", "image", "overlay_image"]
    duration: float | None = Field(default=None, gt=0, description="Hold time for stills")
    start_time: float = Field(default=0.0, ge=0)
    end_time: float | None = Field(default=None, gt=0)
    opacity: float = Field(default=1.0, ge=0, le=1)
    x: str = "(W-w)/2"
    y: str = "(H-h)/2"

    @model_validator(mode="after")
    def validate_kind_params(self) -> "GraphInput":
        if self.kind == "image" and self.duration is None:
            raise ValueError("image inputs need a duration")
        if self.kind == "overlay_image":
            if self.end_time is None or self.end_time <= self.start_time:
                raise ValueError("overlay_image inputs need start_time < end_time")
        return self

    @property
    def is_primary(self) -> bool:
        return self.kind in ("video", "image")


def enable_between(start: float, end: float) -> str:
    """Inclusive visibility window against the render clock."""
    return f"between(t,{format_value(float(start))},{format_value(float(end))})"


def text_position(value, axis: str) -> str:
    if value == CENTER:
        return "(w-text_w)/2" if axis == "x" else "(h-text_h)/2"
    if isinstance(value, float):
        return format_value(value)
    return str(value)


class FFmpegFilterGraphBuilder:
    """Builds FFmpeg filter graphs for preset-driven video assembly.

    Labels are namespaced per phase: ``src{i}`` for the normalized input at
    decoder index ``i``, ``concat`` for the join, ``ovimg{k}``/``ovl{k}`` for
    the k-th image overlay and ``txt{k}`` for the k-th text overlay. The last
    overlay step writes ``vout`` instead.
    """

    def __init__(self, font_file: Path | None = None):
        self.font_file = font_file if font_file is not None else get_settings().font_file

    def build(
        self,
        inputs: list[GraphInput],
        overlays: list[TextOverlay],
        width: int,
        height: int,
    ) -> FilterGraph:
        """Build the full graph: normalize, concatenate, then fold overlays."""
        if width <= 0 or height <= 0:
            raise FilterGraphError(
                f"Invalid target size {width}x{height}",
                details={"width": width, "height": height},
            )
        primaries = [(i, inp) for i, inp in enumerate(inputs) if inp.is_primary]
        image_overlays = [(i, inp) for i, inp in enumerate(inputs) if inp.kind == "overlay_image"]
        if not primaries:
            raise FilterGraphError("At least one video or image input is required")

        graph = FilterGraph()

        # Per-input normalization
        labels = []
        for index, inp in primaries:
            stages = []
            if inp.kind == "image":
                stages.append(FilterStage.of("loop", loop=-1, size=1))
                stages.append(FilterStage.of("trim", duration=inp.duration))
            stages.extend(self.fit_stages(width, height))
            labels.append(graph.add([f"{index}:v"], stages, f"src{index}"))

        # Concat
        current = graph.add(
            labels,
            [FilterStage.of("concat", n=len(labels), v=1, a=0)],
            CONCAT_LABEL,
        )

        total_steps = len(image_overlays) + len(overlays)
        step = 0

        def next_label(default: str) -> str:
            return FINAL_LABEL if step == total_steps - 1 else default

        # Image overlays
        for k, (index, inp) in enumerate(image_overlays):
            prepared = graph.add(
                [f"{index}:v"], self.overlay_image_stages(inp, width, height), f"ovimg{k}"
            )
            current = graph.add(
                [current, prepared],
                [
                    FilterStage.of(
                        "overlay",
                        x=inp.x,
                        y=inp.y,
                        enable=enable_between(inp.start_time, inp.end_time),
                    )
                ],
                next_label(f"ovl{k}"),
            )
            step += 1

        # Text overlays
        for k, overlay in enumerate(overlays):
            current = graph.add(
                [current], [self.drawtext_stage(overlay)], next_label(f"txt{k}")
            )
            step += 1

        graph.final_label = current
        graph.check_labels()
        logger.debug(
            "Built filter graph: %d inputs, %d image overlays, %d text overlays",
            len(primaries),
            len(image_overlays),
            len(overlays),
        )
        return graph

    def fit_stages(self, width: int, height: int) -> list[FilterStage]:
        """Scale into the frame keeping aspect ratio, pad centered, square pixels."""
        return [
            FilterStage.of(
                "scale", w=width, h=height, force_original_aspect_ratio="decrease"
            ),
            FilterStage.of("pad", w=width, h=height, x="(ow-iw)/2", y="(oh-ih)/2"),
            FilterStage.of("setsar", sar=1),
        ]

    def overlay_image_stages(self, inp: GraphInput, width: int, height: int) -> list[FilterStage]:
        """Scale an overlay image to the frame width and pad it to the frame height.

        The aspect ratio is kept, so an image taller than the frame keeps its
        full height and overflows evenly above and below when centred.
        """
        return [
            FilterStage.of("scale", w=width, h=-2),
            FilterStage.of("format", pix_fmts="rgba"),
            FilterStage.of(
                "pad",
                w=width,
                h=f"max(ih,{height})",
                x="(ow-iw)/2",
                y="(oh-ih)/2",
                color="black@0",
            ),
            FilterStage.of("setsar", sar=1),
            FilterStage.of("colorchannelmixer", aa=inp.opacity),
        ]

    def drawtext_stage(self, overlay: TextOverlay) -> FilterStage:
        params: list[tuple[str, object]] = []
        if self.font_file:
            params.append(("fontfile", Path(self.font_file).as_posix()))
        params.extend(
            [
                ("text", overlay.text),
                ("expansion", "none"),
                ("x", text_position(overlay.x, "x")),
                ("y", text_position(overlay.y, "y")),
                ("fontsize", overlay.font_size),
                ("fontcolor", overlay.color),
                ("borderw", overlay.border_width),
                ("bordercolor", overlay.border_color),
                ("enable", enable_between(overlay.start_time, overlay.end_time)),
            ]
        )
        if overlay.box:
            params.extend(
                [
                    ("box", 1),
                    ("boxcolor", overlay.box_color),
                    ("boxborderw", overlay.box_border_width),
                ]
            )
        return FilterStage(operation="drawtext", params=tuple(params))
