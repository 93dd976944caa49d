"""
StepGrid Interfaces

Protocol definitions for the editor's integration points.

The editor never mutates the grid itself: at the end of each gesture it calls
exactly one method on a GridOwnerInterface. Audio hints go to a
PreviewInterface. NoteGridWidget implements GridOwnerInterface by re-emitting
each call as a Qt signal, so hosts can also connect signals instead.
"""

from typing import List, Mapping, Any, Optional, Protocol, Sequence, runtime_checkable

from .types import AddRequest, CellRef, MoveRequest, Note


@runtime_checkable
class GridOwnerInterface(Protocol):
    """
    Protocol for the application that owns the grid and the selection.

    Implement this to receive committed edits from the editor.
    """

    def toggle_note(self, row: int, col: int) -> None:
        """Remove the note starting at (row, col) if present, else add a 1-step note."""
        ...

    def add_note(self, row: int, col: int, duration: int,
                 data: Optional[Mapping[str, Any]] = None) -> None:
        """Insert a new note, with optional field overrides."""
        ...

    def add_notes(self, requests: Sequence[AddRequest]) -> None:
        """Insert several notes as one edit (pen strokes)."""
        ...

    def commit_note(self, from_row: int, from_col: int, to_row: int, to_col: int,
                    data: Optional[Mapping[str, Any]] = None) -> None:
        """Atomically relocate/resize exactly one note."""
        ...

    def commit_multi_note(self, requests: Sequence[MoveRequest]) -> None:
        """Atomically relocate/resize a batch of notes."""
        ...

    def copy_multi_note(self, requests: Sequence[MoveRequest]) -> None:
        """Clone a batch of notes to new positions, leaving the sources."""
        ...

    def select_notes(self, cells: List[CellRef]) -> None:
        """Replace the selection."""
        ...


@runtime_checkable
class PreviewInterface(Protocol):
    """
    Protocol for the audio collaborator.

    Fire-and-forget: the editor ignores return values.
    """

    def preview_note(self, row: int, note: Optional[Note] = None) -> None:
        """Start sounding a row, optionally with the note being edited."""
        ...

    def stop_preview_note(self) -> None:
        """Stop any sounding preview."""
        ...
