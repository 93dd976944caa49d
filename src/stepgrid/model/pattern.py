"""
Pattern Document

Reference grid owner. Implements GridOwnerInterface on top of an immutable
Grid and keeps the editor's data invariants:

- Notes never overlap within a row. The note being placed wins: notes that
  start inside its span are removed, and a note running into its start is
  truncated.
- Every note fits the pattern: 0 <= col, col + duration <= steps.
- The selection only references cells that hold a note.

Every mutation is one undo step (bounded history).
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from ..constants import STEPS_PER_PATTERN
from ..logging import GridLog as Log
from ..timing.snap import clamp_duration, clamp_octave, clamp_row, clamp_start
from ..types import AddRequest, CellRef, Grid, MoveRequest, Note, note_changes
from .grid import (
    all_cells, covering_note, empty_grid, note_at, to_grid, valid_selection,
)

MAX_UNDO_STEPS = 30

# Mutable working copy of a grid during one edit
_Cells = List[List[Optional[Note]]]


class PatternDocument(QObject):
    """
    Owns one pattern grid and its selection.

    Signals:
        grid_changed(object): New Grid after any mutation
        selection_changed(list): New list of CellRef
        status_message(str, bool): User-facing message, is_error
        history_changed(bool, bool): can_undo, can_redo
    """

    grid_changed = pyqtSignal(object)
    selection_changed = pyqtSignal(list)
    status_message = pyqtSignal(str, bool)
    history_changed = pyqtSignal(bool, bool)

    def __init__(
        self,
        rows: int = 0,
        steps: int = STEPS_PER_PATTERN,
        grid: Optional[Grid] = None,
        default_octave_shift: int = 0,
        max_undo_steps: int = MAX_UNDO_STEPS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._grid: Grid = to_grid(grid) if grid is not None else empty_grid(rows, steps)
        self._steps = len(self._grid[0]) if self._grid else steps
        self._selection: List[CellRef] = []
        self._default_octave_shift = clamp_octave(default_octave_shift)
        self._max_undo_steps = max(1, max_undo_steps)
        self._undo: List[Tuple[Grid, List[CellRef]]] = []
        self._redo: List[Tuple[Grid, List[CellRef]]] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def selection(self) -> List[CellRef]:
        return list(self._selection)

    @property
    def row_count(self) -> int:
        return len(self._grid)

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def default_octave_shift(self) -> int:
        return self._default_octave_shift

    @default_octave_shift.setter
    def default_octave_shift(self, value: int):
        self._default_octave_shift = clamp_octave(value)

    def note_at(self, row: int, col: int) -> Optional[Note]:
        return note_at(self._grid, row, col)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    # =========================================================================
    # GridOwnerInterface
    # =========================================================================

    def toggle_note(self, row: int, col: int) -> None:
        """Remove the note starting at (row, col), or add a 1-step note there."""
        if not self._in_bounds(row, col):
            Log.warning(f"PatternDocument: toggle outside grid ({row}, {col})")
            return

        cells = self._cells()
        selection = self._selection
        if cells[row][col] is not None:
            cells[row][col] = None
            selection = [ref for ref in selection if ref != CellRef(row, col)]
            Log.debug(f"PatternDocument: removed note at ({row}, {col})")
        elif covering_note(self._grid, row, col) is not None:
            # Covered by another note's tail; toggling must not shorten it
            Log.debug(f"PatternDocument: ({row}, {col}) is covered, toggle ignored")
            return
        else:
            cells[row][col] = Note(duration=1, octave_shift=self._default_octave_shift)
            Log.debug(f"PatternDocument: added note at ({row}, {col})")
        self._apply(cells, selection)

    def add_note(self, row: int, col: int, duration: int = 1,
                 data: Optional[Mapping[str, Any]] = None) -> None:
        if not self._in_bounds(row, col):
            Log.warning(f"PatternDocument: add outside grid ({row}, {col})")
            return
        cells = self._cells()
        self._place(cells, row, col, self._new_note(duration, data))
        self._apply(cells, self._selection)

    def add_notes(self, requests: Sequence[AddRequest]) -> None:
        cells = self._cells()
        added = 0
        for req in requests:
            if not self._in_bounds(req.row, req.col):
                Log.warning(f"PatternDocument: add outside grid ({req.row}, {req.col})")
                continue
            self._place(cells, req.row, req.col, self._new_note(req.duration, req.data))
            added += 1
        if added:
            self._apply(cells, self._selection)
            self.status_message.emit(f"Added {added} note{'s' if added != 1 else ''}", False)

    def commit_note(self, from_row: int, from_col: int, to_row: int, to_col: int,
                    data: Optional[Mapping[str, Any]] = None) -> None:
        """Relocate/resize one note. A missing source is ignored."""
        source = note_at(self._grid, from_row, from_col)
        if source is None:
            Log.warning(f"PatternDocument: no note at ({from_row}, {from_col}) to commit")
            return

        cells = self._cells()
        cells[from_row][from_col] = None
        target = self._place(cells, to_row, to_col, self._changed_note(source, data))

        src = CellRef(from_row, from_col)
        selection = [target if ref == src else ref for ref in self._selection]
        self._apply(cells, selection)

    def commit_multi_note(self, requests: Sequence[MoveRequest]) -> None:
        """
        Apply a batch of relocations/resizes as one edit.

        All sources are read from the grid before the edit and cleared before
        any target is placed, so notes can swap places within one batch.
        Several requests may share a source (a split produces two notes).
        """
        placed = self._batch(requests, clear_sources=True)
        if placed is not None:
            count = len({(r.from_row, r.from_col) for r in requests})
            self.status_message.emit(f"Moved {count} note{'s' if count != 1 else ''}", False)

    def copy_multi_note(self, requests: Sequence[MoveRequest]) -> None:
        """Place copies of the requested notes; sources stay where they are."""
        placed = self._batch(requests, clear_sources=False)
        if placed is not None:
            self.status_message.emit(f"Copied {len(placed)} note{'s' if len(placed) != 1 else ''}", False)

    def select_notes(self, cells: List[CellRef]) -> None:
        selection = valid_selection(self._grid, dict.fromkeys(cells))
        if selection != self._selection:
            self._selection = selection
            self.selection_changed.emit(list(selection))

    # =========================================================================
    # Extra editing operations
    # =========================================================================

    def update_note(self, row: int, col: int, data: Mapping[str, Any]) -> None:
        """Change fields of a note in place (duration is re-clamped)."""
        self.commit_note(row, col, row, col, data)

    def select_all(self) -> None:
        self.select_notes(all_cells(self._grid))

    def clear(self) -> None:
        self._apply(self._cells(empty=True), [])

    def set_grid(self, grid: Grid, record: bool = True) -> None:
        """Replace the whole grid (e.g. loading a pattern)."""
        grid = to_grid(grid)
        if record:
            self._push_history()
        self._grid = grid
        self._steps = len(grid[0]) if grid else self._steps
        self._selection = valid_selection(grid, self._selection)
        self.grid_changed.emit(self._grid)
        self.selection_changed.emit(list(self._selection))
        self._emit_history()

    def undo(self) -> bool:
        if not self._undo:
            self.status_message.emit("Nothing to undo", False)
            return False
        self._redo.append((self._grid, list(self._selection)))
        grid, selection = self._undo.pop()
        self._restore(grid, selection)
        return True

    def redo(self) -> bool:
        if not self._redo:
            self.status_message.emit("Nothing to redo", False)
            return False
        self._undo.append((self._grid, list(self._selection)))
        grid, selection = self._redo.pop()
        self._restore(grid, selection)
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    def _in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < len(self._grid) and 0 <= col < self._steps

    def _cells(self, empty: bool = False) -> _Cells:
        if empty:
            return [[None] * self._steps for _ in self._grid]
        return [list(row) for row in self._grid]

    def _new_note(self, duration: int, data: Optional[Mapping[str, Any]]) -> Note:
        fields: Dict[str, Any] = {'duration': duration, 'octave_shift': self._default_octave_shift}
        fields.update(note_changes(data))
        fields['duration'] = max(1, int(round(fields['duration'])))
        fields['octave_shift'] = clamp_octave(int(fields['octave_shift']))
        return Note(**fields)

    def _changed_note(self, source: Note, data: Optional[Mapping[str, Any]]) -> Note:
        changes = note_changes(data)
        if 'duration' in changes:
            changes['duration'] = max(1, int(round(changes['duration'])))
        if 'octave_shift' in changes:
            changes['octave_shift'] = clamp_octave(int(changes['octave_shift']))
        return source.with_changes(**changes)

    def _place(self, cells: _Cells, row: int, col: int, note: Note) -> CellRef:
        """
        Write a note into the working cells, clamped, resolving overlaps.

        Returns:
            The cell the note actually landed on
        """
        row = clamp_row(row, len(cells))
        duration = clamp_duration(note.duration, 0, self._steps)
        col = clamp_start(col, duration, self._steps)
        if duration != note.duration:
            note = note.with_changes(duration=duration)
        end = col + duration
        line = cells[row]

        # Notes starting inside the new span are replaced
        for c in range(col + 1, end):
            line[c] = None

        # A note running into the new start is cut short
        for c in range(col - 1, -1, -1):
            prev = line[c]
            if prev is not None:
                if c + prev.duration > col:
                    line[c] = prev.with_changes(duration=col - c)
                break

        line[col] = note
        return CellRef(row, col)

    def _batch(self, requests: Sequence[MoveRequest], clear_sources: bool) -> Optional[List[CellRef]]:
        before = self._grid
        cells = self._cells()
        sources: Dict[CellRef, Note] = {}
        for req in requests:
            note = note_at(before, req.from_row, req.from_col)
            if note is None:
                Log.warning(f"PatternDocument: no note at ({req.from_row}, {req.from_col}), skipped")
                continue
            sources[req.source] = note
        if not sources:
            return None

        if clear_sources:
            for ref in sources:
                cells[ref.row][ref.col] = None

        placed: List[CellRef] = []
        moved: Dict[CellRef, List[CellRef]] = {}
        for req in requests:
            note = sources.get(req.source)
            if note is None:
                continue
            target = self._place(cells, req.to_row, req.to_col, self._changed_note(note, req.data))
            placed.append(target)
            moved.setdefault(req.source, []).append(target)

        # Selected sources follow their notes; copies become the new selection
        if clear_sources:
            selection: List[CellRef] = []
            for ref in self._selection:
                selection.extend(moved.get(ref, [ref]))
        else:
            selection = placed
        self._apply(cells, selection)
        Log.info(f"PatternDocument: {'moved' if clear_sources else 'copied'} {len(sources)} note(s)")
        return placed

    def _apply(self, cells: _Cells, selection: Iterable[CellRef]) -> None:
        self._push_history()
        self._grid = to_grid(cells)
        self.grid_changed.emit(self._grid)

        selection = valid_selection(self._grid, dict.fromkeys(selection))
        if selection != self._selection:
            self._selection = selection
            self.selection_changed.emit(list(selection))
        self._emit_history()

    def _push_history(self) -> None:
        self._undo.append((self._grid, list(self._selection)))
        if len(self._undo) > self._max_undo_steps:
            del self._undo[0]
        self._redo.clear()

    def _restore(self, grid: Grid, selection: List[CellRef]) -> None:
        self._grid = grid
        self._selection = list(selection)
        self.grid_changed.emit(self._grid)
        self.selection_changed.emit(list(self._selection))
        self._emit_history()

    def _emit_history(self) -> None:
        self.history_changed.emit(bool(self._undo), bool(self._redo))
