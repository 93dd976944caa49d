"""
Tests for snap maths and grid geometry.
"""
import pytest

from stepgrid.timing.geometry import GridGeometry
from stepgrid.timing.snap import (
    clamp_duration, clamp_octave, clamp_row, clamp_start, round_duration_up,
    snap_column_down, snap_nearest, validate_snap,
)


class TestSnap:
    """Quantization helpers."""

    @pytest.mark.parametrize("snap", [1, 2, 4])
    def test_valid_snaps_accepted(self, snap):
        assert validate_snap(snap) == snap

    @pytest.mark.parametrize("snap", [0, 3, 8])
    def test_invalid_snap_rejected(self, snap):
        with pytest.raises(ValueError):
            validate_snap(snap)

    def test_columns_snap_down(self):
        assert snap_column_down(5, 4) == 4
        assert snap_column_down(7, 2) == 6
        assert snap_column_down(7, 1) == 7

    def test_drawn_duration_rounds_up_to_snap(self):
        """Drawing from col 5 to col 10 at snap 4: 6 steps -> 8."""
        assert round_duration_up(10 - 5 + 1, 4) == 8

    def test_duration_never_below_one_snap_unit(self):
        assert round_duration_up(0, 1) == 1
        assert round_duration_up(-3, 2) == 2

    def test_snap_nearest_rounds_halves_up(self):
        assert snap_nearest(5.9, 1) == 6
        assert snap_nearest(6, 4) == 8
        assert snap_nearest(5.9, 4) == 4
        assert snap_nearest(-0.4, 1) == 0


class TestClamp:
    """Inputs are clamped, never rejected."""

    def test_row_clamped_into_grid(self):
        assert clamp_row(-2, 5) == 0
        assert clamp_row(9, 5) == 4

    def test_start_keeps_note_inside_pattern(self):
        assert clamp_start(15, 4, 16) == 12
        assert clamp_start(-1, 2, 16) == 0

    def test_duration_clamped_to_remaining_steps(self):
        assert clamp_duration(10, 12, 16) == 4
        assert clamp_duration(0, 3, 16) == 1

    def test_octave_clamped(self):
        assert clamp_octave(7) == 3
        assert clamp_octave(-9) == -3


class TestGridGeometry:
    """Pixel <-> cell mapping."""

    def test_column_and_row_lookup(self, geometry):
        assert geometry.column_at(80) == 0
        assert geometry.column_at(80 + 59) == 0
        assert geometry.column_at(80 + 60) == 1
        assert geometry.row_at(39) == 0
        assert geometry.row_at(40) == 1

    def test_gutter(self, geometry):
        assert geometry.in_gutter(79)
        assert not geometry.in_gutter(80)
        assert geometry.column_at(20) < 0

    def test_cell_position_round_trip(self, geometry):
        assert geometry.cell_x(3) == 80 + 180
        assert geometry.row_y(2) == 80
        assert geometry.column_at(geometry.cell_x(5) + 1) == 5

    def test_scroll_offsets_mapping(self, geometry):
        narrow = GridGeometry.fit(400, 100, 8, min_row_height=30, min_step_width=40)
        scrolled = narrow.with_scroll(120, 60)
        assert scrolled.scroll_x == 120
        assert scrolled.column_at(80) == 3
        assert scrolled.row_at(0) == 2

    def test_scroll_clamped_to_content(self, geometry):
        # Everything fits: nothing to scroll
        assert geometry.with_scroll(500, 500).scroll_x == 0
        assert geometry.with_scroll(500, 500).scroll_y == 0

    def test_fit_stretches_cells(self):
        geo = GridGeometry.fit(80 + 16 * 50, 400, 10)
        assert geo.step_width == 50
        assert geo.row_height == 40

    def test_fit_respects_minimum_cell_size(self):
        geo = GridGeometry.fit(200, 50, 10, min_row_height=18, min_step_width=24)
        assert geo.step_width == 24
        assert geo.row_height == 18
        assert geo.max_scroll_x > 0
        assert geo.max_scroll_y > 0

    def test_non_positive_cell_size_rejected(self):
        with pytest.raises(ValueError):
            GridGeometry(row_height=0)
