"""Tests for AnimationState."""

import io

import numpy as np
import pytest
from PIL import Image

from dmi_sprites import AnimationState, Dirs
from dmi_sprites import imaging

from conftest import indexed_color, solid_frame


def is_blank(frame) -> bool:
    return bool(np.all(imaging.raw_pixels(frame) == imaging.BLANK_COLOR))


class TestConstruction:
    """Tests for building states directly."""

    def test_frames_converted_and_encoded(self):
        state = AnimationState("s", frames=[Image.new("RGB", (4, 4), (1, 2, 3))])
        assert state.frames[0].mode == "RGBA"
        assert len(state.frames_encoded) == 1
        assert imaging.load(state.frames_encoded[0]).getpixel((0, 0)) == (1, 2, 3, 255)

    def test_framecount_divides_by_dirs(self, walk_state):
        assert walk_state.framecount == 2
        assert (walk_state.width, walk_state.height) == (32, 32)

    def test_invalid_dirs_rejected(self):
        with pytest.raises(ValueError):
            AnimationState("s", dirs=2)

    def test_size_of_empty_state_is_an_error(self):
        with pytest.raises(ValueError):
            AnimationState("s").width


class TestSetFramecount:
    """Tests for set_framecount."""

    def test_growing_pads_blank_frames_and_delays(self, idle_state):
        idle_state.set_framecount(4)
        assert idle_state.framecount == 4
        assert len(idle_state.frames) == len(idle_state.frames_encoded) == 4
        assert all(is_blank(frame) for frame in idle_state.frames[2:])
        assert idle_state.frames[2].size == (32, 32)
        assert idle_state.delays == [1, 2, 1, 1]

    def test_growing_pads_every_direction(self, walk_state):
        walk_state.set_framecount(4)
        assert len(walk_state.frames) == 16
        for direction in (Dirs.SOUTH, Dirs.NORTH, Dirs.EAST, Dirs.WEST):
            assert not is_blank(walk_state.get_frame(1, direction))
            assert is_blank(walk_state.get_frame(2, direction))
            assert is_blank(walk_state.get_frame(3, direction))

    def test_empty_delays_stay_empty(self, walk_state):
        walk_state.set_framecount(3)
        assert walk_state.delays == []

    def test_hotspots_repeat_last_value(self, idle_state):
        idle_state.set_framecount(4)
        assert idle_state.hotspots == [(16, 31), (16, 30), (16, 30), (16, 30)]

    def test_shrinking_truncates(self, idle_state):
        idle_state.set_framecount(1)
        assert len(idle_state.frames) == 1
        assert idle_state.delays == [1]
        assert idle_state.hotspots == [(16, 31)]

    def test_padding_empty_state_needs_size(self):
        state = AnimationState("s")
        with pytest.raises(ValueError):
            state.set_framecount(2)
        state.set_framecount(2, size=(8, 8))
        assert [frame.size for frame in state.frames] == [(8, 8), (8, 8)]


class TestSetDirs:
    """Tests for set_dirs."""

    def test_growing_directions(self, idle_state):
        idle_state.set_dirs(4)
        assert idle_state.dirs == 4
        assert len(idle_state.frames) == 8
        assert idle_state.framecount == 2
        assert idle_state.delays == [1, 2]
        assert idle_state.hotspots == [(16, 31), (16, 30)]

    def test_shrinking_directions(self, walk_state):
        walk_state.set_dirs(1)
        assert walk_state.dirs == 1
        assert len(walk_state.frames) == 2

    def test_invalid_direction_count(self, walk_state):
        with pytest.raises(ValueError):
            walk_state.set_dirs(3)


class TestPreview:
    """Tests for generate_preview and mark_dirty."""

    def test_single_frame_preview_is_encoded_frame(self):
        state = AnimationState("s", frames=[solid_frame(indexed_color(0))])
        assert state.generate_preview(Dirs.SOUTH) == state.get_frame_encoded(0)

    def test_animated_preview(self, idle_state):
        preview = idle_state.generate_preview(Dirs.SOUTH)
        with Image.open(io.BytesIO(preview)) as image:
            assert image.format == "PNG"
            assert getattr(image, "n_frames", 1) == 2

    def test_preview_cached_per_direction(self, walk_state):
        first = walk_state.generate_preview(Dirs.NORTH)
        assert walk_state.generate_preview(Dirs.NORTH) is first
        assert set(walk_state.directional_previews) == {int(Dirs.NORTH)}

    def test_mark_dirty_clears_cache(self, walk_state):
        walk_state.generate_preview(Dirs.NORTH)
        walk_state.generate_preview(Dirs.SOUTH)
        walk_state.mark_dirty()
        assert walk_state.directional_previews == {}

    def test_empty_state_has_no_preview(self):
        with pytest.raises(ValueError):
            AnimationState("s").generate_preview()


class TestClone:
    """Tests for clone."""

    def test_clone_copies_attributes(self, walk_state):
        clone = walk_state.clone()
        assert clone.to_dict() == walk_state.to_dict()

    def test_pixel_edits_do_not_leak(self, walk_state):
        clone = walk_state.clone()
        clone.frames[0].putpixel((0, 0), (1, 2, 3, 4))
        assert walk_state.frames[0].getpixel((0, 0)) == indexed_color(10)

    def test_list_edits_do_not_leak(self, idle_state):
        clone = idle_state.clone()
        clone.delays.append(9)
        clone.hotspots[0] = (0, 0)
        assert idle_state.delays == [1, 2]
        assert idle_state.hotspots[0] == (16, 31)


class TestSnapshot:
    """Tests for to_dict and from_dict."""

    def test_round_trip(self, idle_state):
        restored = AnimationState.from_dict(idle_state.to_dict())
        assert restored.to_dict() == idle_state.to_dict()
        assert restored.hotspots == idle_state.hotspots
        assert restored.frames[1].getpixel((0, 0)) == indexed_color(1)

    def test_snapshot_is_json_ready(self, walk_state):
        payload = walk_state.to_dict()
        assert all(isinstance(data, str) for data in payload["frames_encoded"])
        assert payload["hotspots"] is None

    def test_hotspots_without_values_snapshot_as_none(self, idle_state):
        idle_state.hotspots = [None, None]
        assert idle_state.to_dict()["hotspots"] is None
