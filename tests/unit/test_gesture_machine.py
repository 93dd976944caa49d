"""
Tests for the pure gesture machine: press, move, wheel, pinch, validity.
"""
import pytest

from stepgrid.editing.hit_test import EdgeSide, NoteBodyHit
from stepgrid.editing.machine import (
    GestureContext, members_of, move, pinch, press, start_pinch, still_valid, wheel,
)
from stepgrid.editing.states import (
    Drawing, Idle, Merging, Moving, MovingGroup, PenStroke, ResizingLeft, ResizingLeftGroup,
    ResizingRight, RollingEdit, Selecting, Splitting, Stretching, Strumming,
)
from stepgrid.types import CellRef, EditMode, Modifiers, PointerEvent, PointerKind


def at(x, y, t=0.0, **kwargs):
    return PointerEvent(x=x, y=y, time_ms=t, **kwargs)


@pytest.fixture
def ctx(make_grid, geometry):
    def _ctx(notes=None, **kwargs):
        return GestureContext(grid=make_grid(8, notes), geometry=geometry, **kwargs)
    return _ctx


# =============================================================================
# Press
# =============================================================================

class TestPress:
    """Which gesture a press starts."""

    def test_empty_cell_starts_drawing(self, ctx, center):
        state = press(at(*center(2, 5)), ctx())
        assert isinstance(state, Drawing)
        assert (state.row, state.col, state.duration) == (2, 5, 1)

    def test_drawing_uses_default_octave(self, ctx, center):
        state = press(at(*center(2, 5)), ctx(default_octave_shift=2))
        assert state.octave_shift == 2

    def test_note_body_starts_moving(self, ctx, center):
        state = press(at(*center(1, 4)), ctx({(1, 3): 3}))
        assert isinstance(state, Moving)
        assert (state.row, state.col, state.to_row, state.to_col) == (1, 3, 1, 3)
        assert not state.cloning

    def test_alt_on_body_clones(self, ctx, center):
        state = press(at(*center(1, 4), modifiers=Modifiers(alt=True)), ctx({(1, 3): 3}))
        assert isinstance(state, Moving)
        assert state.cloning

    def test_edges_start_resizing(self, ctx):
        c = ctx({(0, 2): 2})
        assert isinstance(press(at(80 + 120 + 5, 20), c), ResizingLeft)
        right = press(at(80 + 240 - 5, 20), c)
        assert isinstance(right, ResizingRight)
        assert right.duration == 2

    def test_boundary_starts_rolling_edit(self, ctx):
        state = press(at(80 + 240 + 5, 20), ctx({(0, 2): 2, (0, 4): 3}))
        assert isinstance(state, RollingEdit)
        assert state.boundary == 4
        assert state.pressed == CellRef(0, 4)

    def test_select_modifier_starts_marquee(self, ctx, center):
        state = press(at(*center(0, 0), modifiers=Modifiers(ctrl=True)), ctx({(0, 0): 1}))
        assert isinstance(state, Selecting)
        assert not state.cleared_selection

    def test_meta_is_select_modifier_too(self, ctx, center):
        assert isinstance(press(at(*center(0, 0), modifiers=Modifiers(meta=True)), ctx()), Selecting)

    def test_empty_press_with_selection_clears_it(self, ctx, center):
        c = ctx({(0, 0): 1}, selection=(CellRef(0, 0),))
        state = press(at(*center(3, 3)), c)
        assert isinstance(state, Selecting)
        assert state.cleared_selection

    def test_selected_note_starts_group_gesture(self, ctx, center):
        selection = (CellRef(0, 2), CellRef(3, 6))
        c = ctx({(0, 2): 2, (3, 6): 2}, selection=selection)
        state = press(at(80 + 150, 20), c)
        assert isinstance(state, MovingGroup)
        assert state.anchor == CellRef(0, 2)
        assert set(state.members) == set(selection)
        left = press(at(80 + 120 + 3, 20), c)
        assert isinstance(left, ResizingLeftGroup)

    def test_gutter_starts_strumming(self, ctx):
        state = press(at(20, 100), ctx())
        assert isinstance(state, Strumming)
        assert state.row == 2

    def test_press_outside_grid_ignored(self, ctx):
        assert press(at(80 + 30, 40 * 9 + 5), ctx()) is None
        assert press(at(20, 40 * 9 + 5), ctx()) is None

    def test_pen_mode_starts_stroke(self, ctx, center):
        state = press(at(*center(1, 5)), ctx(mode=EditMode.PEN, snap=2))
        assert isinstance(state, PenStroke)
        assert state.cells == (CellRef(1, 4),)
        assert state.duration == 2


class TestRazorPress:
    """Razor mode splits bodies and merges boundaries."""

    def test_split_at_pointer_column(self, ctx):
        # Note at col 2 lasting 4; pointer just inside col 4
        state = press(at(80 + 4 * 60 + 10, 20), ctx({(0, 2): 4}, mode=EditMode.RAZOR))
        assert isinstance(state, Splitting)
        assert state.at_col == 4

    def test_one_step_note_cannot_split(self, ctx, center):
        assert press(at(*center(0, 2)), ctx({(0, 2): 1}, mode=EditMode.RAZOR)) is None

    def test_boundary_merges(self, ctx):
        state = press(at(80 + 240 + 5, 20), ctx({(0, 2): 2, (0, 4): 3}, mode=EditMode.RAZOR))
        assert isinstance(state, Merging)
        assert (state.left_col, state.right_col) == (2, 4)

    def test_empty_cell_ignored(self, ctx, center):
        assert press(at(*center(0, 2)), ctx(mode=EditMode.RAZOR)) is None


# =============================================================================
# Move
# =============================================================================

class TestMove:
    """Pointer samples update the active gesture."""

    def test_idle_tracks_hover(self, ctx, center):
        state = move(Idle(), at(*center(0, 3)), ctx({(0, 3): 2}))
        assert isinstance(state, Idle)
        assert isinstance(state.hovered, NoteBodyHit)

    def test_drawing_quantizes_duration(self, ctx, center):
        """Snap 4: drawing from col 5 to col 10 yields duration 8."""
        c = ctx(snap=4)
        state = Drawing(row=0, col=5, start_x=center(0, 5)[0], start_y=20, started_ms=0)
        state = move(state, at(*center(0, 10)), c)
        assert state.duration == 8
        assert state.moved

    def test_drawing_clamped_to_pattern_end(self, ctx, center):
        state = Drawing(row=0, col=14, start_x=center(0, 14)[0], start_y=20, started_ms=0)
        state = move(state, at(80 + 16 * 60 + 200, 20), ctx())
        assert state.duration == 2

    def test_drawing_backwards_keeps_one_step(self, ctx, center):
        state = Drawing(row=0, col=5, start_x=center(0, 5)[0], start_y=20, started_ms=0)
        assert move(state, at(*center(0, 1)), ctx()).duration == 1

    def test_small_jitter_is_not_a_drag(self, ctx, center):
        x, y = center(0, 5)
        state = Drawing(row=0, col=5, start_x=x, start_y=y, started_ms=0)
        assert not move(state, at(x + 2, y + 2), ctx()).moved

    def test_moved_is_sticky(self, ctx, center):
        x, y = center(0, 5)
        state = Drawing(row=0, col=5, start_x=x, start_y=y, started_ms=0)
        state = move(state, at(x + 30, y), ctx())
        assert move(state, at(x, y), ctx()).moved

    def test_moving_tracks_delta(self, ctx, center):
        c = ctx({(1, 3): 2})
        state = press(at(*center(1, 3)), c)
        state = move(state, at(*center(3, 7)), c)
        assert (state.to_row, state.to_col) == (3, 7)

    def test_moving_delta_snaps(self, ctx, center):
        c = ctx({(1, 4): 2}, snap=4)
        state = press(at(*center(1, 4)), c)
        assert move(state, at(*center(1, 9)), c).to_col == 8
        assert move(state, at(*center(1, 5)), c).to_col == 4

    def test_resize_right(self, ctx):
        c = ctx({(0, 2): 2})
        state = press(at(80 + 240 - 5, 20), c)
        state = move(state, at(80 + 6 * 60 + 10, 20), c)
        assert state.duration == 5

    def test_resize_left_keeps_end(self, ctx):
        c = ctx({(0, 4): 2})
        state = press(at(80 + 240 + 5, 20), c)
        assert isinstance(state, ResizingLeft)
        state = move(state, at(80 + 60 + 10, 20), c)
        assert (state.to_col, state.duration) == (1, 5)
        # Never past the end
        state = move(state, at(80 + 10 * 60, 20), c)
        assert (state.to_col, state.duration) == (5, 1)

    def test_rolling_edit_clamped_inside_pair(self, ctx):
        c = ctx({(0, 2): 2, (0, 4): 3})
        state = press(at(80 + 240 + 5, 20), c)
        assert move(state, at(80 + 240 + 5 + 60, 20), c).boundary == 5
        assert move(state, at(80 + 240 + 5 + 600, 20), c).boundary == 6
        assert move(state, at(80 + 240 + 5 - 600, 20), c).boundary == 3

    def test_marquee_follows_pointer(self, ctx):
        state = press(at(100, 10, modifiers=Modifiers(ctrl=True)), ctx())
        state = move(state, at(50, 200), ctx())
        assert state.rect == (50, 10, 100, 200)

    def test_strum_changes_row(self, ctx):
        state = press(at(20, 20), ctx())
        assert move(state, at(20, 140), ctx()).row == 3
        assert move(state, at(20, 4000), ctx()).row == 0

    def test_pen_stroke_skips_painted_and_covered_cells(self, ctx, center):
        c = ctx({(0, 6): 2}, mode=EditMode.PEN)
        state = press(at(*center(0, 4)), c)
        for col in (4, 5, 6, 7, 8):
            state = move(state, at(*center(0, col)), c)
        assert state.cells == (CellRef(0, 4), CellRef(0, 5), CellRef(0, 8))


class TestStretch:
    """Proportional stretch via handles and pinch."""

    @pytest.fixture
    def selected_ctx(self, ctx):
        selection = (CellRef(0, 4), CellRef(1, 8))
        return ctx({(0, 4): 1, (1, 8): 1}, selection=selection)

    def test_right_handle_pivots_on_left_edge(self, selected_ctx):
        # Bounds cols 4..9 -> span 5; right handle at x = 80 + 9*60
        state = press(at(80 + 540, 40), selected_ctx)
        assert isinstance(state, Stretching)
        assert (state.side, state.origin, state.span) == (EdgeSide.RIGHT, 4, 5)
        state = move(state, at(80 + 540 + 300, 40), selected_ctx)
        assert state.ratio == pytest.approx(2.0)

    def test_left_handle_pivots_on_right_edge(self, selected_ctx):
        state = press(at(80 + 240, 40), selected_ctx)
        assert (state.side, state.origin) == (EdgeSide.LEFT, 9)
        state = move(state, at(80 + 240 - 300, 40), selected_ctx)
        assert state.ratio == pytest.approx(2.0)

    def test_ratio_has_floor(self, selected_ctx):
        state = press(at(80 + 540, 40), selected_ctx)
        state = move(state, at(0, 40), selected_ctx)
        assert state.ratio == pytest.approx(0.1)

    def test_pinch(self, selected_ctx):
        state = start_pinch(at(300, 40, kind=PointerKind.TOUCH), 100.0, selected_ctx)
        assert state.via_pinch
        state = pinch(state, 150.0, selected_ctx)
        assert state.ratio == pytest.approx(1.5)
        assert state.moved

    def test_pinch_needs_selection(self, ctx):
        assert start_pinch(at(300, 40), 100.0, ctx()) is None


# =============================================================================
# Wheel / validity
# =============================================================================

class TestWheel:
    """Octave changes while a gesture is active."""

    def test_drawing_octave_clamped(self):
        state = Drawing(row=0, col=0, start_x=0, start_y=0, started_ms=0)
        state = wheel(state, 5)
        assert state.octave_shift == 3
        assert state.modified
        assert wheel(state, -10).octave_shift == -3

    def test_group_octave_delta(self):
        state = MovingGroup(members=(CellRef(0, 0),), anchor=CellRef(0, 0),
                            start_x=0, start_y=0, started_ms=0)
        assert wheel(state, 2).octave_delta == 2
        assert wheel(state, 20).octave_delta == 6

    def test_other_gestures_ignore_wheel(self):
        state = Selecting(x2=0, y2=0, start_x=0, start_y=0, started_ms=0)
        assert wheel(state, 1) is None
        assert wheel(Idle(), 1) is None

    def test_zero_notches_ignored(self):
        assert wheel(Drawing(row=0, col=0, start_x=0, start_y=0, started_ms=0), 0) is None


class TestValidity:
    """A gesture on a vanished note is no longer valid."""

    def test_single_note(self, ctx, center, make_grid):
        c = ctx({(1, 3): 2})
        state = press(at(*center(1, 3)), c)
        assert still_valid(state, c.grid)
        assert not still_valid(state, make_grid(8))
        assert members_of(state) == (CellRef(1, 3),)

    def test_rolling_edit_needs_adjacency(self, ctx, make_grid):
        c = ctx({(0, 2): 2, (0, 4): 3})
        state = press(at(80 + 240 + 5, 20), c)
        assert still_valid(state, c.grid)
        assert not still_valid(state, make_grid(8, {(0, 2): 1, (0, 4): 3}))

    def test_drawing_always_valid(self, make_grid):
        state = Drawing(row=0, col=0, start_x=0, start_y=0, started_ms=0)
        assert still_valid(state, make_grid(1))
        assert members_of(state) == ()


class TestPackageExports:
    """The editing package re-exports only names that exist."""

    def test_all_names_resolve(self):
        import stepgrid.editing as editing
        missing = [name for name in editing.__all__ if not hasattr(editing, name)]
        assert missing == []
        assert 'is_active' not in editing.__all__
