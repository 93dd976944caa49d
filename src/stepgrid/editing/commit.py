"""
Commit Protocol

Turns the final state of a gesture into at most one request to the grid
owner. Exactly one commit per completed gesture; cancelled gestures and
gestures whose notes vanished produce none.

Quick click: released within quick_click_ms, never moved past the drag
threshold, and no field changed by the wheel.
"""

from dataclasses import dataclass, field
from typing import List

from ..constants import QUICK_CLICK_MS
from ..interfaces import GridOwnerInterface
from ..logging import GridLog as Log
from ..model.grid import note_at
from ..types import AddRequest, CellRef, Grid, MoveRequest, PointerEvent, PointerKind
from .machine import GestureContext, still_valid
from .states import (
    Drawing, GestureState, InteractionState, Merging, Moving, MovingGroup, PenStroke,
    ResizingLeft, ResizingLeftGroup, ResizingRight, ResizingRightGroup, RollingEdit,
    Selecting, Splitting, Stretching, Strumming,
)
from .targets import (
    group_move_requests, group_resize_requests, marquee_cells, rolling_requests,
    single_target, split_requests, stretch_requests,
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


# =============================================================================
# Commit variants
# =============================================================================

@dataclass(frozen=True)
class ToggleNote:
    row: int
    col: int
    kind = "toggle"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.toggle_note(self.row, self.col)

    def describe(self) -> str:
        return f"Toggled note at {self.row}:{self.col}"


@dataclass(frozen=True)
class AddNote:
    row: int
    col: int
    duration: int
    data: dict = field(default_factory=dict)
    kind = "add"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.add_note(self.row, self.col, self.duration, dict(self.data))

    def describe(self) -> str:
        return f"Added {self.duration}-step note"


@dataclass(frozen=True)
class AddNotes:
    requests: tuple
    kind = "add-many"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.add_notes(list(self.requests))

    def describe(self) -> str:
        return f"Painted {_plural(len(self.requests), 'note')}"


@dataclass(frozen=True)
class CommitNote:
    from_row: int
    from_col: int
    to_row: int
    to_col: int
    data: dict = field(default_factory=dict)
    label: str = "Edited note"
    kind = "commit"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.commit_note(self.from_row, self.from_col, self.to_row, self.to_col, dict(self.data))

    def describe(self) -> str:
        return self.label


@dataclass(frozen=True)
class CommitMultiNote:
    requests: tuple
    label: str = ""
    kind = "commit-multi"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.commit_multi_note(list(self.requests))

    def describe(self) -> str:
        return self.label or f"Moved {_plural(len(self.requests), 'note')}"


@dataclass(frozen=True)
class CopyMultiNote:
    requests: tuple
    kind = "copy-multi"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.copy_multi_note(list(self.requests))

    def describe(self) -> str:
        return f"Copied {_plural(len(self.requests), 'note')}"


@dataclass(frozen=True)
class SelectNotes:
    cells: tuple
    kind = "select"

    def apply(self, owner: GridOwnerInterface) -> None:
        owner.select_notes(list(self.cells))

    def describe(self) -> str:
        if not self.cells:
            return "Selection cleared"
        return f"Selected {_plural(len(self.cells), 'note')}"


def dispatch(commit, owner: GridOwnerInterface) -> None:
    """Send one commit to the owner."""
    commit.apply(owner)


# =============================================================================
# Protocol
# =============================================================================

class CommitProtocol:
    """
    Resolves a finished gesture to a commit.

    Args:
        quick_click_ms: Press/release window for a click
    """

    def __init__(self, quick_click_ms: float = QUICK_CLICK_MS):
        self.quick_click_ms = quick_click_ms

    def is_quick_click(self, state: GestureState, event: PointerEvent) -> bool:
        elapsed = event.time_ms - state.started_ms
        return elapsed < self.quick_click_ms and not state.moved and not state.modified

    def resolve(self, state: InteractionState, event: PointerEvent, ctx: GestureContext):
        """
        Returns:
            A commit, or None when the gesture changes nothing
        """
        if not isinstance(state, GestureState):
            return None
        if not still_valid(state, ctx.grid):
            Log.warning(f"Commit: {state.name} target vanished, gesture abandoned")
            return None

        quick = self.is_quick_click(state, event)

        if isinstance(state, Drawing):
            return self._drawing(state, quick)
        if isinstance(state, PenStroke):
            return self._pen(state)
        if isinstance(state, (Moving, ResizingLeft, ResizingRight)):
            if quick:
                return self._click_note(state.cell, state, ctx)
            return self._single(state, ctx)
        if isinstance(state, MovingGroup):
            if quick:
                return self._click_note(state.anchor, state, ctx)
            return self._group_move(state, ctx)
        if isinstance(state, (ResizingLeftGroup, ResizingRightGroup)):
            if quick:
                return self._click_note(state.anchor, state, ctx)
            requests = group_resize_requests(ctx.grid, state, ctx.steps)
            return self._changed_only(
                requests, ctx.grid, state.moved, f"Resized {_plural(len(requests), 'note')}")
        if isinstance(state, Stretching):
            if not state.moved:
                return None
            requests = stretch_requests(ctx.grid, state, ctx.snap, ctx.steps)
            return self._changed_only(
                requests, ctx.grid, state.moved,
                f"Stretched {_plural(len(requests), 'note')} to {state.ratio:.2f}x",
            )
        if isinstance(state, RollingEdit):
            if quick:
                return self._click_note(state.pressed, state, ctx)
            if state.boundary == state.right_col and not state.moved:
                return None
            return CommitMultiNote(tuple(rolling_requests(state)), label="Rolled boundary")
        if isinstance(state, Selecting):
            return SelectNotes(tuple(marquee_cells(ctx.grid, ctx.geometry, state)))
        if isinstance(state, Strumming):
            return None
        if isinstance(state, Splitting):
            if state.moved:
                return None
            return CommitMultiNote(tuple(split_requests(state)), label="Split note")
        if isinstance(state, Merging):
            if state.moved:
                return None
            return CommitNote(
                state.row, state.left_col, state.row, state.left_col,
                {'duration': state.left_note.duration + state.right_note.duration},
                label="Merged notes",
            )
        raise TypeError(f"Unhandled gesture state {type(state).__name__}")

    # =========================================================================
    # Per-gesture rules
    # =========================================================================

    def _drawing(self, state: Drawing, quick: bool):
        if quick:
            return ToggleNote(state.row, state.col)
        return AddNote(state.row, state.col, state.duration, {'octave_shift': state.octave_shift})

    def _pen(self, state: PenStroke):
        requests = tuple(
            AddRequest(cell.row, cell.col, state.duration, {'octave_shift': state.octave_shift})
            for cell in state.cells
        )
        return AddNotes(requests) if requests else None

    def _click_note(self, cell: CellRef, state: GestureState, ctx: GestureContext):
        """Click on a note: touch deletes it, mouse toggles its selection."""
        if state.pointer_kind is PointerKind.TOUCH:
            return ToggleNote(cell.row, cell.col)
        selection = list(ctx.selection)
        if cell in selection:
            selection.remove(cell)
        else:
            selection.append(cell)
        return SelectNotes(tuple(selection))

    def _single(self, state, ctx: GestureContext):
        row, col, duration = single_target(state, ctx.row_count, ctx.steps)
        if isinstance(state, Moving):
            octave = state.octave_shift
            if state.cloning:
                data = state.note.to_dict()
                data.update(duration=duration, octave_shift=octave)
                return AddNote(row, col, duration, data)
            data = {'duration': duration}
            if octave != state.note.octave_shift:
                data['octave_shift'] = octave
            unchanged = (row, col) == (state.row, state.col) and len(data) == 1
            label = "Moved note"
        else:
            data = {'duration': duration}
            unchanged = col == state.col and duration == state.note.duration
            label = "Resized note"
        if unchanged and not state.moved:
            return None
        return CommitNote(state.row, state.col, row, col, data, label=label)

    def _group_move(self, state: MovingGroup, ctx: GestureContext):
        requests = group_move_requests(ctx.grid, state, ctx.row_count, ctx.steps)
        shifted = state.delta_row or state.delta_col or state.octave_delta
        if state.cloning and shifted:
            return CopyMultiNote(tuple(requests))
        return self._changed_only(requests, ctx.grid, state.moved, f"Moved {_plural(len(requests), 'note')}")

    def _changed_only(self, requests: List[MoveRequest], grid: Grid, moved: bool, label: str):
        """Batch commit, or None if the pointer never moved and no request changes anything."""
        def changes(req: MoveRequest) -> bool:
            if req.position_changed:
                return True
            note = note_at(grid, req.from_row, req.from_col)
            return note is not None and note.with_changes(**req.data) != note

        if not moved and not any(changes(req) for req in requests):
            return None
        return CommitMultiNote(tuple(requests), label=label)
