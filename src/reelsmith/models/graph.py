"""Typed filter graph representation.

A graph is an ordered list of chains. Each chain reads one or more stream
labels, runs a comma-separated sequence of filter stages and writes one or
more new labels. Nothing here knows about quoting until :meth:`FilterGraph.render`
turns the graph into ffmpeg's ``-filter_complex`` text.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from reelsmith.models.errors import FilterGraphError

# Stream specifiers that refer to decoder outputs rather than graph labels.
_INPUT_STREAM_RE = re.compile(r"^\d+:[vas](?::\d+)?$")


def escape_option_value(value: str) -> str:
    """Escape a value for the filter option parser (``key=value:key=value``)."""
    return re.sub(r"([\\':])", r"\\\1", value)


def escape_graph_text(text: str) -> str:
    """Escape a filter argument string for the filtergraph parser."""
    return re.sub(r"([\\'\[\],;])", r"\\\1", text)


def format_value(value) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        text = f"{value:.6f}".rstrip("0").rstrip(".")
        return "0" if text in ("", "-0") else text
    return str(value)


def is_input_stream(label: str) -> bool:
    return bool(_INPUT_STREAM_RE.match(label))


class FilterStage(BaseModel):
    """A single filter invocation, e.g. ``scale=w=1080:h=1920``."""

    model_config = ConfigDict(frozen=True)

    operation: str
    params: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, operation: str, **params) -> "FilterStage":
        return cls(operation=operation, params=tuple(params.items()))

    def param(self, key: str, default=None):
        for k, v in self.params:
            if k == key:
                return v
        return default

    def render(self) -> str:
        if not self.params:
            return self.operation
        args = ":".join(f"{k}={escape_option_value(format_value(v))}" for k, v in self.params)
        return f"{self.operation}={escape_graph_text(args)}"


class FilterChain(BaseModel):
    """Stages applied in sequence from ``inputs`` to ``outputs``."""

    model_config = ConfigDict(frozen=True)

    inputs: tuple[str, ...]
    stages: tuple[FilterStage, ...]
    outputs: tuple[str, ...]

    @property
    def operations(self) -> list[str]:
        return [s.operation for s in self.stages]

    def render(self) -> str:
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        return ins + ",".join(stage.render() for stage in self.stages) + outs


class FilterGraph(BaseModel):
    """Ordered filter chains plus the label of the final video stream."""

    chains: list[FilterChain] = Field(default_factory=list)
    final_label: str = ""

    def add(self, inputs, stages, output: str) -> str:
        self.chains.append(
            FilterChain(inputs=tuple(inputs), stages=tuple(stages), outputs=(output,))
        )
        return output

    @property
    def output_labels(self) -> list[str]:
        return [label for chain in self.chains for label in chain.outputs]

    def chains_with(self, operation: str) -> list[FilterChain]:
        return [c for c in self.chains if operation in c.operations]

    def check_labels(self) -> None:
        """Check label bookkeeping: unique outputs, no forward references,
        and exactly one unconsumed label which must be ``final_label``."""
        produced: set[str] = set()
        consumed: set[str] = set()
        for index, chain in enumerate(self.chains):
            for label in chain.inputs:
                if is_input_stream(label):
                    continue
                if label not in produced:
                    raise FilterGraphError(
                        f"Chain {index} consumes '{label}' before it is produced",
                        details={"label": label, "chain": index},
                    )
                if label in consumed:
                    raise FilterGraphError(
                        f"Label '{label}' is consumed twice",
                        details={"label": label, "chain": index},
                    )
                consumed.add(label)
            for label in chain.outputs:
                if label in produced or is_input_stream(label):
                    raise FilterGraphError(
                        f"Label '{label}' is produced twice",
                        details={"label": label, "chain": index},
                    )
                produced.add(label)

        dangling = sorted(produced - consumed)
        if dangling != [self.final_label]:
            raise FilterGraphError(
                f"Expected '{self.final_label}' as the only unconsumed label, found {dangling}",
                details={"dangling": dangling, "final_label": self.final_label},
            )

    def expressions(self) -> list[str]:
        return [chain.render() for chain in self.chains]

    def render(self) -> str:
        return ";".join(self.expressions())
