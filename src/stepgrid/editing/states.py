"""
Interaction States

One gesture is one state value. Exactly one is active at a time; the machine
replaces it on every input sample and the renderer reads whichever is
current. States are frozen, so a frame can never see a half-updated gesture.

    Idle ──press──> Drawing | PenStroke | Moving | ResizingLeft | ResizingRight
                    MovingGroup | ResizingLeftGroup | ResizingRightGroup
                    Stretching | RollingEdit | Selecting | Strumming
                    Splitting | Merging
    any ──release/cancel──> Idle
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from ..types import CellRef, Note, PointerKind
from .hit_test import EdgeSide, Hit


@dataclass(frozen=True)
class Idle:
    """No gesture. Carries the hover hit for cursor and highlight feedback."""
    name: ClassVar[str] = "idle"
    hovered: Optional[Hit] = None


@dataclass(frozen=True, kw_only=True)
class GestureState:
    """
    Fields shared by every active gesture.

    Attributes:
        start_x, start_y: Press position in widget pixels
        started_ms: Press timestamp
        pointer_id: Pointer that owns the gesture
        pointer_kind: Mouse or touch
        moved: Pointer travelled past the drag threshold at some point
        modified: A field was changed without moving (wheel octave)
    """
    name: ClassVar[str] = "gesture"
    start_x: float
    start_y: float
    started_ms: float
    pointer_id: int = 0
    pointer_kind: PointerKind = PointerKind.MOUSE
    moved: bool = False
    modified: bool = False


@dataclass(frozen=True, kw_only=True)
class Drawing(GestureState):
    name: ClassVar[str] = "drawing"
    row: int
    col: int
    duration: int = 1
    octave_shift: int = 0


@dataclass(frozen=True, kw_only=True)
class PenStroke(GestureState):
    """Freehand painting: one note per empty snapped cell crossed."""
    name: ClassVar[str] = "pen"
    cells: Tuple[CellRef, ...]
    duration: int = 1
    octave_shift: int = 0


@dataclass(frozen=True, kw_only=True)
class SingleNoteState(GestureState):
    """Gesture on one note referenced by its start cell."""
    row: int
    col: int
    note: Note

    @property
    def cell(self) -> CellRef:
        return CellRef(self.row, self.col)


@dataclass(frozen=True, kw_only=True)
class Moving(SingleNoteState):
    name: ClassVar[str] = "moving"
    to_row: int
    to_col: int
    octave_shift: int = 0
    cloning: bool = False


@dataclass(frozen=True, kw_only=True)
class ResizingLeft(SingleNoteState):
    name: ClassVar[str] = "resizing-left"
    to_col: int
    duration: int


@dataclass(frozen=True, kw_only=True)
class ResizingRight(SingleNoteState):
    name: ClassVar[str] = "resizing-right"
    duration: int


@dataclass(frozen=True, kw_only=True)
class GroupState(GestureState):
    """Gesture on the whole selection; anchor is the pressed note."""
    members: Tuple[CellRef, ...]
    anchor: CellRef


@dataclass(frozen=True, kw_only=True)
class MovingGroup(GroupState):
    name: ClassVar[str] = "moving-group"
    delta_row: int = 0
    delta_col: int = 0
    octave_delta: int = 0
    cloning: bool = False


@dataclass(frozen=True, kw_only=True)
class ResizingLeftGroup(GroupState):
    name: ClassVar[str] = "resizing-left-group"
    delta_col: int = 0


@dataclass(frozen=True, kw_only=True)
class ResizingRightGroup(GroupState):
    name: ClassVar[str] = "resizing-right-group"
    delta_col: int = 0


@dataclass(frozen=True, kw_only=True)
class Stretching(GestureState):
    """
    Proportional stretch of the selection around a pivot column.

    origin is the pivot; span is the bounding-box width in steps at press.
    """
    name: ClassVar[str] = "stretching"
    members: Tuple[CellRef, ...]
    side: EdgeSide
    origin: int
    span: int
    ratio: float = 1.0
    via_pinch: bool = False
    pinch_start_distance: float = 0.0


@dataclass(frozen=True, kw_only=True)
class RollingEdit(GestureState):
    """Drag of the boundary shared by two adjacent notes in one row."""
    name: ClassVar[str] = "rolling-edit"
    row: int
    left_col: int
    left_note: Note
    right_col: int
    right_note: Note
    boundary: int
    pressed: CellRef

    @property
    def right_end(self) -> int:
        return self.right_col + self.right_note.duration


@dataclass(frozen=True, kw_only=True)
class Selecting(GestureState):
    """Marquee in screen pixels, from the press point to (x2, y2)."""
    name: ClassVar[str] = "selecting"
    x2: float
    y2: float
    cleared_selection: bool = False

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y)"""
        return (
            min(self.start_x, self.x2), min(self.start_y, self.y2),
            max(self.start_x, self.x2), max(self.start_y, self.y2),
        )


@dataclass(frozen=True, kw_only=True)
class Strumming(GestureState):
    """Dragging down the row gutter, previewing each row entered."""
    name: ClassVar[str] = "strumming"
    row: int
    octave_shift: int = 0


@dataclass(frozen=True, kw_only=True)
class Splitting(SingleNoteState):
    """Razor click on a note body."""
    name: ClassVar[str] = "splitting"
    at_col: int


@dataclass(frozen=True, kw_only=True)
class Merging(GestureState):
    """Razor click on a shared boundary."""
    name: ClassVar[str] = "merging"
    row: int
    left_col: int
    left_note: Note
    right_col: int
    right_note: Note


InteractionState = Union[
    Idle, Drawing, PenStroke, Moving, ResizingLeft, ResizingRight,
    MovingGroup, ResizingLeftGroup, ResizingRightGroup, Stretching,
    RollingEdit, Selecting, Strumming, Splitting, Merging,
]
