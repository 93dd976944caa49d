"""
Gesture Machine

Pure transitions of the interaction state:

    press(event, ctx)        Idle -> gesture (or None: press ignored)
    move(state, event, ctx)  gesture -> updated gesture, Idle -> Idle(hovered)
    wheel(state, notches)    octave change on gestures that carry one
    pinch(...)               two-finger stretch of the selection

Nothing here talks to Qt or the owner. GestureController feeds samples in and
turns the final state into a commit.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple

from ..constants import DRAG_THRESHOLD_PX, MAX_GROUP_OCTAVE_DELTA, MIN_STRETCH_RATIO
from ..model.grid import covering_note, note_at, valid_selection
from ..timing.geometry import GridGeometry
from ..timing.snap import (
    clamp, clamp_duration, clamp_octave, round_duration_up, snap_column_down, snap_nearest,
)
from ..types import CellRef, EditMode, Grid, PointerEvent
from .hit_test import (
    BoundaryHit, EdgeSide, EmptyHit, GutterHit, HitTester, NoteBodyHit, NoteEdgeHit,
    TransformHandleHit, selection_bounds,
)
from .states import (
    Drawing, GestureState, GroupState, Idle, InteractionState, Merging, Moving, MovingGroup,
    PenStroke, ResizingLeft, ResizingLeftGroup, ResizingRight, ResizingRightGroup,
    RollingEdit, Selecting, SingleNoteState, Splitting, Stretching, Strumming,
)
from .targets import split_column


@dataclass(frozen=True)
class GestureContext:
    """Everything a transition reads besides the state and the event."""
    grid: Grid
    geometry: GridGeometry
    selection: Tuple[CellRef, ...] = ()
    snap: int = 1
    mode: EditMode = EditMode.NORMAL
    default_octave_shift: int = 0
    drag_threshold_px: float = DRAG_THRESHOLD_PX
    hit_tester: HitTester = field(default_factory=HitTester)

    @property
    def row_count(self) -> int:
        return len(self.grid)

    @property
    def steps(self) -> int:
        return self.geometry.steps

    def hit(self, x: float, y: float):
        return self.hit_tester.hit(x, y, self.grid, self.geometry, self.snap, self.selection)


def _anchor(event: PointerEvent) -> dict:
    return dict(
        start_x=event.x,
        start_y=event.y,
        started_ms=event.time_ms,
        pointer_id=event.pointer_id,
        pointer_kind=event.kind,
    )


def _snap_delta(delta: int, snap: int) -> int:
    return delta if snap == 1 else snap_nearest(delta, snap)


# =============================================================================
# Press
# =============================================================================

def press(event: PointerEvent, ctx: GestureContext) -> Optional[GestureState]:
    """
    Start a gesture for a pointer-down.

    Returns:
        The new gesture, or None when the press lands outside anything editable
    """
    base = _anchor(event)

    if event.modifiers.select:
        return Selecting(x2=event.x, y2=event.y, **base)

    hit = ctx.hit(event.x, event.y)

    if isinstance(hit, TransformHandleHit):
        return _start_stretch(hit.side, ctx, base)

    if isinstance(hit, GutterHit):
        if 0 <= hit.row < ctx.row_count:
            return Strumming(row=hit.row, octave_shift=ctx.default_octave_shift, **base)
        return None

    if not 0 <= hit.row < ctx.row_count:
        return None

    if ctx.mode is EditMode.RAZOR:
        return _razor_press(hit, event, ctx, base)

    selected = valid_selection(ctx.grid, ctx.selection)

    if isinstance(hit, (NoteBodyHit, NoteEdgeHit)) and hit.cell in selected:
        group = dict(members=tuple(selected), anchor=hit.cell, **base)
        if isinstance(hit, NoteBodyHit):
            return MovingGroup(cloning=event.modifiers.clone, **group)
        if hit.side is EdgeSide.LEFT:
            return ResizingLeftGroup(**group)
        return ResizingRightGroup(**group)

    if isinstance(hit, BoundaryHit):
        pressed_right = ctx.geometry.column_float(event.x) >= hit.right_col
        pressed = CellRef(hit.row, hit.right_col if pressed_right else hit.left_col)
        return RollingEdit(
            row=hit.row,
            left_col=hit.left_col, left_note=hit.left_note,
            right_col=hit.right_col, right_note=hit.right_note,
            boundary=hit.boundary, pressed=pressed, **base,
        )

    if isinstance(hit, NoteBodyHit):
        return Moving(
            row=hit.row, col=hit.col, note=hit.note,
            to_row=hit.row, to_col=hit.col,
            octave_shift=hit.note.octave_shift,
            cloning=event.modifiers.clone, **base,
        )

    if isinstance(hit, NoteEdgeHit):
        if hit.side is EdgeSide.LEFT:
            return ResizingLeft(row=hit.row, col=hit.col, note=hit.note,
                                to_col=hit.col, duration=hit.note.duration, **base)
        return ResizingRight(row=hit.row, col=hit.col, note=hit.note,
                             duration=hit.note.duration, **base)

    # Empty cell
    if not 0 <= hit.col < ctx.steps:
        return None
    if selected:
        # First click into empty space drops the selection
        return Selecting(x2=event.x, y2=event.y, cleared_selection=True, **base)
    if ctx.mode is EditMode.PEN:
        return PenStroke(
            cells=(CellRef(hit.row, hit.col),),
            duration=clamp_duration(ctx.snap, hit.col, ctx.steps),
            octave_shift=ctx.default_octave_shift, **base,
        )
    return Drawing(row=hit.row, col=hit.col, octave_shift=ctx.default_octave_shift, **base)


def _razor_press(hit, event: PointerEvent, ctx: GestureContext, base: dict) -> Optional[GestureState]:
    if isinstance(hit, BoundaryHit):
        return Merging(row=hit.row, left_col=hit.left_col, left_note=hit.left_note,
                       right_col=hit.right_col, right_note=hit.right_note, **base)
    if isinstance(hit, (NoteBodyHit, NoteEdgeHit)):
        at = split_column(hit.col, hit.note.duration, ctx.geometry.column_float(event.x), ctx.snap)
        if at is None:
            return None
        return Splitting(row=hit.row, col=hit.col, note=hit.note, at_col=at, **base)
    return None


def _start_stretch(side: EdgeSide, ctx: GestureContext, base: dict) -> Optional[Stretching]:
    bounds = selection_bounds(ctx.grid, ctx.selection)
    if bounds is None:
        return None
    origin = bounds.min_col if side is EdgeSide.RIGHT else bounds.max_end
    return Stretching(
        members=tuple(valid_selection(ctx.grid, ctx.selection)),
        side=side,
        origin=origin,
        span=bounds.max_end - bounds.min_col,
        **base,
    )


# =============================================================================
# Move
# =============================================================================

def move(state: InteractionState, event: PointerEvent, ctx: GestureContext) -> InteractionState:
    """Apply one pointer sample to the active gesture."""
    if isinstance(state, Idle):
        return Idle(hovered=ctx.hit(event.x, event.y))

    geo = ctx.geometry
    threshold = ctx.drag_threshold_px
    moved = state.moved or (
        abs(event.x - state.start_x) >= threshold or abs(event.y - state.start_y) >= threshold
    )
    col = geo.column_at(event.x)
    row = geo.row_at(event.y)
    delta_col = _snap_delta(col - geo.column_at(state.start_x), ctx.snap)
    delta_row = row - geo.row_at(state.start_y)

    if isinstance(state, Drawing):
        duration = round_duration_up(col - state.col + 1, ctx.snap)
        return replace(state, moved=moved, duration=clamp_duration(duration, state.col, ctx.steps))

    if isinstance(state, PenStroke):
        return _extend_stroke(replace(state, moved=moved), row, col, ctx)

    if isinstance(state, Moving):
        return replace(state, moved=moved,
                       to_row=state.row + delta_row, to_col=state.col + delta_col)

    if isinstance(state, ResizingRight):
        duration = round_duration_up(col - state.col + 1, ctx.snap)
        return replace(state, moved=moved, duration=clamp_duration(duration, state.col, ctx.steps))

    if isinstance(state, ResizingLeft):
        end = state.col + state.note.duration
        to_col = clamp(snap_column_down(col, ctx.snap), 0, end - 1)
        return replace(state, moved=moved, to_col=to_col, duration=end - to_col)

    if isinstance(state, MovingGroup):
        return replace(state, moved=moved, delta_row=delta_row, delta_col=delta_col)

    if isinstance(state, (ResizingLeftGroup, ResizingRightGroup)):
        return replace(state, moved=moved, delta_col=delta_col)

    if isinstance(state, Stretching):
        if state.via_pinch:
            return replace(state, moved=moved)
        delta_steps = (event.x - state.start_x) / geo.step_width
        if state.side is EdgeSide.LEFT:
            delta_steps = -delta_steps
        ratio = max(MIN_STRETCH_RATIO, (state.span + delta_steps) / state.span)
        return replace(state, moved=moved, ratio=ratio)

    if isinstance(state, RollingEdit):
        drift = geo.column_float(event.x) - geo.column_float(state.start_x)
        boundary = clamp(snap_nearest(state.right_col + drift, ctx.snap),
                         state.left_col + 1, state.right_end - 1)
        return replace(state, moved=moved, boundary=boundary)

    if isinstance(state, Selecting):
        return replace(state, moved=moved, x2=event.x, y2=event.y)

    if isinstance(state, Strumming):
        if 0 <= row < ctx.row_count and row != state.row:
            return replace(state, moved=moved, row=row)
        return replace(state, moved=moved)

    # Splitting / Merging: razor clicks only track movement
    return replace(state, moved=moved)


def _extend_stroke(state: PenStroke, row: int, col: int, ctx: GestureContext) -> PenStroke:
    if not (0 <= row < ctx.row_count and 0 <= col < ctx.steps):
        return state
    col = snap_column_down(col, ctx.snap)
    if covering_note(ctx.grid, row, col) is not None:
        return state
    duration = clamp_duration(ctx.snap, col, ctx.steps)
    for cell in state.cells:
        if cell.row == row and cell.col < col + duration and col < cell.col + state.duration:
            return state
    return replace(state, cells=state.cells + (CellRef(row, col),))


# =============================================================================
# Wheel / pinch
# =============================================================================

def wheel(state: InteractionState, notches: int) -> Optional[InteractionState]:
    """
    Transpose the note(s) of the active gesture by whole octaves.

    Returns:
        Updated state, or None when the gesture has no octave to change
    """
    if notches == 0:
        return None
    if isinstance(state, (Drawing, Moving, Strumming)):
        return replace(state, octave_shift=clamp_octave(state.octave_shift + notches), modified=True)
    if isinstance(state, MovingGroup):
        delta = clamp(state.octave_delta + notches, -MAX_GROUP_OCTAVE_DELTA, MAX_GROUP_OCTAVE_DELTA)
        return replace(state, octave_delta=delta, modified=True)
    return None


def start_pinch(event: PointerEvent, distance: float, ctx: GestureContext) -> Optional[Stretching]:
    """Two-finger stretch; pivot is the left edge of the selection."""
    if distance <= 0:
        return None
    stretch = _start_stretch(EdgeSide.RIGHT, ctx, _anchor(event))
    if stretch is None:
        return None
    return replace(stretch, via_pinch=True, pinch_start_distance=distance)


def pinch(state: Stretching, distance: float, ctx: GestureContext) -> Stretching:
    if not state.via_pinch or state.pinch_start_distance <= 0:
        return state
    ratio = max(MIN_STRETCH_RATIO, distance / state.pinch_start_distance)
    moved = state.moved or abs(distance - state.pinch_start_distance) >= ctx.drag_threshold_px
    return replace(state, ratio=ratio, moved=moved)


def pointer_distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


# =============================================================================
# Validity
# =============================================================================

def still_valid(state: InteractionState, grid: Grid) -> bool:
    """
    False once a note the gesture is editing is gone from the grid.

    A vanished note is never committed.
    """
    if isinstance(state, SingleNoteState):
        return note_at(grid, state.row, state.col) is not None
    if isinstance(state, GroupState):
        return all(note_at(grid, ref.row, ref.col) is not None for ref in state.members)
    if isinstance(state, Stretching):
        return all(note_at(grid, ref.row, ref.col) is not None for ref in state.members)
    if isinstance(state, (RollingEdit, Merging)):
        left = note_at(grid, state.row, state.left_col)
        return (
            left is not None
            and left.duration == state.right_col - state.left_col
            and note_at(grid, state.row, state.right_col) is not None
        )
    return True


def members_of(state: InteractionState) -> Sequence[CellRef]:
    """Cells of committed notes the gesture is editing (hidden from the normal note pass)."""
    if isinstance(state, SingleNoteState):
        return (state.cell,)
    if isinstance(state, (GroupState, Stretching)):
        return state.members
    if isinstance(state, (RollingEdit, Merging)):
        return (CellRef(state.row, state.left_col), CellRef(state.row, state.right_col))
    return ()
