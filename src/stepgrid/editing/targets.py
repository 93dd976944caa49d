"""
Gesture Targets

Where each note of a gesture would land. The renderer draws these as the
live preview and the commit protocol sends them to the owner, so the two
always agree. Every result is clamped into the grid here, at the time it is
read, never trusted from an earlier sample.
"""

from typing import List, Optional, Sequence, Tuple

from ..constants import STEPS_PER_PATTERN
from ..model.grid import iter_notes, note_at
from ..timing.geometry import GridGeometry
from ..timing.snap import (
    clamp, clamp_duration, clamp_octave, clamp_row, clamp_start, snap_nearest,
)
from ..types import CellRef, Grid, MoveRequest, Note
from .states import (
    Moving, MovingGroup, ResizingLeft, ResizingLeftGroup, ResizingRight,
    ResizingRightGroup, RollingEdit, Selecting, Splitting, Stretching,
)

# (row, col, duration) of a provisional note
Placement = Tuple[int, int, int]


def _members(grid: Grid, members: Sequence[CellRef]):
    for ref in members:
        note = note_at(grid, ref.row, ref.col)
        if note is not None:
            yield ref, note


# =============================================================================
# Single note
# =============================================================================

def single_target(state, row_count: int, steps: int = STEPS_PER_PATTERN) -> Placement:
    """Clamped placement of a Moving/ResizingLeft/ResizingRight gesture."""
    if isinstance(state, Moving):
        duration = clamp_duration(state.note.duration, 0, steps)
        return (
            clamp_row(state.to_row, row_count),
            clamp_start(state.to_col, duration, steps),
            duration,
        )
    if isinstance(state, ResizingRight):
        return (state.row, state.col, clamp_duration(state.duration, state.col, steps))
    if isinstance(state, ResizingLeft):
        end = state.col + state.note.duration
        to_col = clamp(state.to_col, 0, end - 1)
        return (state.row, to_col, end - to_col)
    raise TypeError(f"No single-note target for {type(state).__name__}")


# =============================================================================
# Groups
# =============================================================================

def group_move_requests(grid: Grid, state: MovingGroup, row_count: int,
                        steps: int = STEPS_PER_PATTERN) -> List[MoveRequest]:
    """One shared delta, each note clamped on its own."""
    requests = []
    for ref, note in _members(grid, state.members):
        duration = clamp_duration(note.duration, 0, steps)
        data = {}
        if state.octave_delta:
            data['octave_shift'] = clamp_octave(note.octave_shift + state.octave_delta)
        requests.append(MoveRequest(
            ref.row, ref.col,
            clamp_row(ref.row + state.delta_row, row_count),
            clamp_start(ref.col + state.delta_col, duration, steps),
            data,
        ))
    return requests


def group_resize_requests(grid: Grid, state, steps: int = STEPS_PER_PATTERN) -> List[MoveRequest]:
    """Shared column delta applied to every selected note's left or right end."""
    requests = []
    for ref, note in _members(grid, state.members):
        if isinstance(state, ResizingRightGroup):
            duration = clamp_duration(note.duration + state.delta_col, ref.col, steps)
            requests.append(MoveRequest(ref.row, ref.col, ref.row, ref.col, {'duration': duration}))
        elif isinstance(state, ResizingLeftGroup):
            end = ref.col + note.duration
            to_col = clamp(ref.col + state.delta_col, 0, end - 1)
            requests.append(MoveRequest(ref.row, ref.col, ref.row, to_col, {'duration': end - to_col}))
        else:
            raise TypeError(f"No group resize for {type(state).__name__}")
    return requests


def stretch_placement(col: int, duration: int, origin: int, ratio: float, snap: int,
                      steps: int = STEPS_PER_PATTERN) -> Tuple[int, int]:
    """
    Scale a note around a pivot column.

    Example (snap 1): col 8, duration 1, origin 4, ratio 2.0 -> (12, 2)
    """
    new_duration = clamp_duration(max(1, snap_nearest(duration * ratio, snap)), 0, steps)
    new_col = clamp_start(snap_nearest(origin + (col - origin) * ratio, snap), new_duration, steps)
    return new_col, new_duration


def unquantized_stretch(col: int, duration: int, origin: int, ratio: float) -> Tuple[float, float]:
    """Raw scaled position/length, drawn as the ghost next to the snapped preview."""
    return origin + (col - origin) * ratio, max(0.0, duration * ratio)


def stretch_requests(grid: Grid, state: Stretching, snap: int,
                     steps: int = STEPS_PER_PATTERN) -> List[MoveRequest]:
    requests = []
    for ref, note in _members(grid, state.members):
        col, duration = stretch_placement(ref.col, note.duration, state.origin, state.ratio, snap, steps)
        requests.append(MoveRequest(ref.row, ref.col, ref.row, col, {'duration': duration}))
    return requests


# =============================================================================
# Rolling edit / razor
# =============================================================================

def rolling_requests(state: RollingEdit) -> List[MoveRequest]:
    """
    Left note ends at the boundary, right note starts there.

    The combined span [left_col, right_end) is unchanged.
    """
    boundary = clamp(state.boundary, state.left_col + 1, state.right_end - 1)
    return [
        MoveRequest(state.row, state.left_col, state.row, state.left_col,
                    {'duration': boundary - state.left_col}),
        MoveRequest(state.row, state.right_col, state.row, boundary,
                    {'duration': state.right_end - boundary}),
    ]


def split_requests(state: Splitting) -> List[MoveRequest]:
    """Two requests from the same source: the head keeps the cell, the tail starts at the cut."""
    end = state.col + state.note.duration
    at = clamp(state.at_col, state.col + 1, end - 1)
    return [
        MoveRequest(state.row, state.col, state.row, state.col, {'duration': at - state.col}),
        MoveRequest(state.row, state.col, state.row, at, {'duration': end - at}),
    ]


def split_column(col: int, duration: int, pointer_col: float, snap: int) -> Optional[int]:
    """Cut column for a razor click, or None if the note cannot be split there."""
    if duration < 2:
        return None
    at = snap_nearest(pointer_col, snap)
    if at <= col or at >= col + duration:
        at = int(pointer_col)
    if at <= col or at >= col + duration:
        return None
    return at


# =============================================================================
# Marquee
# =============================================================================

def marquee_cells(grid: Grid, geometry: GridGeometry, state: Selecting) -> List[CellRef]:
    """
    Notes whose row band and column span both intersect the marquee.

    Touching an edge does not count; a zero-area rectangle selects nothing.
    """
    min_x, min_y, max_x, max_y = state.rect
    selected = []
    for r, c, note in iter_notes(grid):
        top = geometry.row_y(r)
        bottom = top + geometry.row_height
        if not (bottom > min_y and top < max_y):
            continue
        left = geometry.cell_x(c)
        right = left + note.duration * geometry.step_width
        if right > min_x and left < max_x:
            selected.append(CellRef(r, c))
    return selected


def note_with(note: Note, **changes) -> Note:
    """Preview copy of a note; octave clamped, unknown keys ignored."""
    if 'octave_shift' in changes:
        changes['octave_shift'] = clamp_octave(changes['octave_shift'])
    return note.with_changes(**changes)
