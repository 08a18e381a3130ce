"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from reelsmith.models.preset import TextOverlay
from reelsmith.rendering.filter_graph import GraphInput


@st.composite
def generate_primary_inputs(draw):
    """Generate a non-empty ordered list of video/image inputs."""
    n = draw(st.integers(min_value=1, max_value=8))
    inputs = []
    for _ in range(n):
        if draw(st.booleans()):
            inputs.append(GraphInput(kind="video"))
        else:
            duration = draw(st.floats(min_value=0.1, max_value=10.0))
            inputs.append(GraphInput(kind="image", duration=round(duration, 3)))
    return inputs


@st.composite
def generate_overlay_images(draw):
    """Generate up to three image overlay inputs with valid windows."""
    n = draw(st.integers(min_value=0, max_value=3))
    overlays = []
    for _ in range(n):
        start = round(draw(st.floats(min_value=0.0, max_value=10.0)), 3)
        length = round(draw(st.floats(min_value=0.01, max_value=5.0)), 3)
        opacity = draw(st.floats(min_value=0.0, max_value=1.0))
        overlays.append(
            GraphInput(
                kind="overlay_image",
                start_time=start,
                end_time=start + length,
                opacity=opacity,
            )
        )
    return overlays


@st.composite
def generate_text_overlays(draw):
    """Generate text overlays, including characters that need escaping."""
    n = draw(st.integers(min_value=0, max_value=5))
    overlays = []
    for _ in range(n):
        text = draw(st.text(alphabet="abc XYZ:'\\[],;%{}=", min_size=1, max_size=20))
        start = round(draw(st.floats(min_value=0.0, max_value=20.0)), 2)
        overlays.append(
            TextOverlay(
                text=text,
                start_time=start,
                end_time=start + 1.0,
                x=draw(st.sampled_from(["center", 10, "w-100"])),
                y=draw(st.sampled_from(["center", 180, "h/2+50"])),
                box=draw(st.booleans()),
            )
        )
    return overlays


resolutions = st.tuples(
    st.integers(min_value=1, max_value=7680), st.integers(min_value=1, max_value=7680)
)
