"""
StepGrid Data Types
===================

Public data contracts for the grid editor.

These types define the input/output interface for the widget.
Consumers use these types to communicate with the editor -
they don't need to know about internal representations.

Value types are frozen dataclasses so a grid snapshot can be shared with
the render loop without copying.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import MAX_OCTAVE_SHIFT, MIN_OCTAVE_SHIFT

RGB = Tuple[int, int, int]

# Fields a commit may change on a note
NOTE_FIELDS = ("duration", "offset", "octave_shift", "color")

# =============================================================================
# Grid Types
# =============================================================================


@dataclass(frozen=True)
class Note:
    """
    A note anchored at its start cell.

    Attributes:
        duration: Length in steps (>= 1)
        offset: Sub-step offset, not edited by pointer gestures
        octave_shift: Octave transposition in [-3, 3]
        color: Optional RGB override; rows supply the colour otherwise

    Example:
        note = Note(duration=2, octave_shift=1)
        longer = note.with_changes(duration=4)
    """
    duration: int = 1
    offset: float = 0.0
    octave_shift: int = 0
    color: Optional[RGB] = None

    def __post_init__(self):
        if int(self.duration) != self.duration or self.duration < 1:
            raise ValueError(f"Note duration must be an integer >= 1 (got {self.duration})")
        if not MIN_OCTAVE_SHIFT <= self.octave_shift <= MAX_OCTAVE_SHIFT:
            raise ValueError(
                f"Note octave_shift must be in [{MIN_OCTAVE_SHIFT}, {MAX_OCTAVE_SHIFT}] "
                f"(got {self.octave_shift})"
            )

    def with_changes(self, **changes: Any) -> "Note":
        """Copy with the given fields replaced. Unknown keys are ignored."""
        known = {k: v for k, v in changes.items() if k in NOTE_FIELDS}
        return replace(self, **known) if known else self

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'duration': self.duration,
            'offset': self.offset,
            'octave_shift': self.octave_shift,
        }
        if self.color is not None:
            result['color'] = list(self.color)
        return result


# Immutable per frame: rows of Note-or-None cells
Row = Tuple[Optional[Note], ...]
Grid = Tuple[Row, ...]


@dataclass(frozen=True)
class CellRef:
    """Reference to a note by its start cell."""
    row: int
    col: int


@dataclass(frozen=True)
class RowConfig:
    """
    Per-row rendering metadata. Read-only to the editor.

    Attributes:
        label: Text shown in the row gutter
        color: Base note colour for the row
        is_root: Highlight the row as the scale root
    """
    label: str
    color: RGB = (14, 165, 233)
    is_root: bool = False


# =============================================================================
# Output Types (requests sent to the grid owner)
# =============================================================================

@dataclass
class MoveRequest:
    """
    Relocate/resize request for one existing note.

    ``data`` holds the changed note fields (see NOTE_FIELDS).
    """
    from_row: int
    from_col: int
    to_row: int
    to_col: int
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> CellRef:
        return CellRef(self.from_row, self.from_col)

    @property
    def target(self) -> CellRef:
        return CellRef(self.to_row, self.to_col)

    @property
    def position_changed(self) -> bool:
        return self.from_row != self.to_row or self.from_col != self.to_col


@dataclass
class AddRequest:
    """Request to insert a new note."""
    row: int
    col: int
    duration: int = 1
    data: Dict[str, Any] = field(default_factory=dict)


def note_changes(data: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Filter a change mapping down to note fields."""
    if not data:
        return {}
    return {k: v for k, v in data.items() if k in NOTE_FIELDS}


# =============================================================================
# Input Types
# =============================================================================

class EditMode(Enum):
    """Keyboard-held editing mode."""
    NORMAL = auto()
    RAZOR = auto()  # Split/merge notes
    PEN = auto()    # Freehand painting


class PointerKind(Enum):
    MOUSE = auto()
    TOUCH = auto()


@dataclass(frozen=True)
class Modifiers:
    """Keyboard modifier state carried with pointer events."""
    ctrl: bool = False
    meta: bool = False
    alt: bool = False
    shift: bool = False

    @property
    def select(self) -> bool:
        """Marquee modifier (Ctrl on Windows/Linux, Cmd on macOS)."""
        return self.ctrl or self.meta

    @property
    def clone(self) -> bool:
        return self.alt


@dataclass(frozen=True)
class PointerEvent:
    """
    A pointer sample in widget coordinates.

    Attributes:
        x, y: Position in widget pixels
        time_ms: Monotonic timestamp in milliseconds
        pointer_id: 0 for the mouse, touch point id otherwise
        kind: Mouse or touch
        modifiers: Keyboard modifiers held
    """
    x: float
    y: float
    time_ms: float = 0.0
    pointer_id: int = 0
    kind: PointerKind = PointerKind.MOUSE
    modifiers: Modifiers = Modifiers()
