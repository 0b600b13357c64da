"""Tests for direction flags and frame indexing."""

from dmi_sprites import DIR_NAMES, DIR_ORDER, AnimationState, Dirs
from dmi_sprites.directions import dir_name, dir_ordinal

from conftest import indexed_color, solid_frame


class TestDirs:
    """Tests for the direction table."""

    def test_diagonals_combine_cardinal_flags(self):
        assert Dirs.SOUTHEAST == Dirs.SOUTH | Dirs.EAST == 6
        assert Dirs.SOUTHWEST == 10
        assert Dirs.NORTHEAST == 5
        assert Dirs.NORTHWEST == 9

    def test_canonical_order(self):
        assert [int(d) for d in DIR_ORDER] == [2, 1, 4, 8, 6, 10, 5, 9]
        assert [dir_name(d) for d in DIR_ORDER] == DIR_NAMES

    def test_unknown_direction_has_no_ordinal(self):
        assert dir_ordinal(3) == -1


class TestFrameIndex:
    """Tests for AnimationState.frame_index."""

    def test_increases_with_frame_for_fixed_direction(self):
        state = AnimationState("s", dirs=8)
        for direction in DIR_ORDER:
            indices = [state.frame_index(frame, direction) for frame in range(5)]
            assert indices == sorted(set(indices))

    def test_eight_directions_cover_contiguous_block(self):
        state = AnimationState("s", dirs=8)
        for frame in range(3):
            indices = {state.frame_index(frame, direction) for direction in DIR_ORDER}
            assert indices == set(range(frame * 8, frame * 8 + 8))

    def test_four_direction_state_aliases_diagonals_to_south(self):
        state = AnimationState("s", dirs=4)
        assert state.frame_index(1, Dirs.WEST) == 7
        assert state.frame_index(1, Dirs.NORTHEAST) == state.frame_index(1, Dirs.SOUTH) == 4

    def test_single_direction_returns_same_frame_everywhere(self):
        state = AnimationState("s", dirs=1, frames=[solid_frame(indexed_color(0)), solid_frame(indexed_color(1))])
        for frame in range(2):
            expected = state.get_frame(frame, Dirs.SOUTH)
            for direction in DIR_ORDER:
                assert state.get_frame(frame, direction) is expected
                assert state.get_frame_encoded(frame, direction) == state.get_frame_encoded(frame)
