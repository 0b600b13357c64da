"""Shared pytest fixtures for dmi_sprites tests."""

import pytest
from PIL import Image

from dmi_sprites import AnimationState, DmiDocument


def solid_frame(color, size=(32, 32)) -> Image.Image:
    return Image.new("RGBA", size, color)


def indexed_color(index: int):
    """Distinct opaque colour for the n-th frame of a fixture."""
    return ((index * 23) % 256, (index * 47 + 10) % 256, (index * 89 + 30) % 256, 255)


# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture
def idle_state() -> AnimationState:
    """Single direction, two frames with delays and hotspots."""
    return AnimationState(
        "idle",
        dirs=1,
        frames=[solid_frame(indexed_color(0)), solid_frame(indexed_color(1))],
        delays=[1, 2],
        hotspots=[(16, 31), (16, 30)],
    )


@pytest.fixture
def walk_state() -> AnimationState:
    """Four directions, two frames, every frame a different colour."""
    return AnimationState(
        "walk",
        loop=3,
        rewind=True,
        movement=True,
        dirs=4,
        frames=[solid_frame(indexed_color(10 + index)) for index in range(8)],
    )


@pytest.fixture
def sample_document(idle_state, walk_state) -> DmiDocument:
    return DmiDocument(32, 32, [idle_state, walk_state])
