"""
Hit Tester

Maps a pointer position to what it is over. Pure: reads the grid, the
selection and the geometry, never mutates anything.

Priority:
1. Transform handles of a multi-selection (shadow any note underneath)
2. Row gutter
3. Note under the snapped column: shared boundary, edge or body
4. Empty cell
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from ..constants import EDGE_THRESHOLD_PX, TRANSFORM_HANDLE_RADIUS_PX
from ..model.grid import covering_note, note_at, note_ending_at, valid_selection
from ..timing.geometry import GridGeometry
from ..timing.snap import snap_column_down
from ..types import CellRef, Grid, Note


class EdgeSide(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class GutterHit:
    """Row label area, left of the grid."""
    row: int


@dataclass(frozen=True)
class EmptyHit:
    """No note at the snapped cell. Row/col may lie outside the grid."""
    row: int
    col: int


@dataclass(frozen=True)
class NoteBodyHit:
    row: int
    col: int
    note: Note

    @property
    def cell(self) -> CellRef:
        return CellRef(self.row, self.col)


@dataclass(frozen=True)
class NoteEdgeHit:
    row: int
    col: int
    note: Note
    side: EdgeSide

    @property
    def cell(self) -> CellRef:
        return CellRef(self.row, self.col)


@dataclass(frozen=True)
class BoundaryHit:
    """Edge shared by two adjacent notes in one row."""
    row: int
    left_col: int
    left_note: Note
    right_col: int
    right_note: Note

    @property
    def boundary(self) -> int:
        return self.right_col


@dataclass(frozen=True)
class TransformHandleHit:
    """Left or right handle of the selection bounding box."""
    side: EdgeSide


Hit = Union[GutterHit, EmptyHit, NoteBodyHit, NoteEdgeHit, BoundaryHit, TransformHandleHit]


@dataclass(frozen=True)
class SelectionBounds:
    """Bounding box of the selected notes in grid units."""
    min_row: int
    max_row: int  # inclusive
    min_col: int
    max_end: int  # exclusive

    def screen_rect(self, geometry: GridGeometry) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) in screen pixels."""
        return (
            geometry.cell_x(self.min_col),
            geometry.row_y(self.min_row),
            geometry.cell_x(self.max_end),
            geometry.row_y(self.max_row + 1),
        )

    def handle_point(self, side: EdgeSide, geometry: GridGeometry) -> Tuple[float, float]:
        left, top, right, bottom = self.screen_rect(geometry)
        return (left if side is EdgeSide.LEFT else right, (top + bottom) / 2)


def selection_bounds(grid: Grid, selection: Iterable[CellRef]) -> Optional[SelectionBounds]:
    """Bounds of the valid selection entries, or None if fewer than two remain."""
    refs = valid_selection(grid, selection)
    if len(refs) < 2:
        return None
    ends = [ref.col + note_at(grid, ref.row, ref.col).duration for ref in refs]
    return SelectionBounds(
        min_row=min(ref.row for ref in refs),
        max_row=max(ref.row for ref in refs),
        min_col=min(ref.col for ref in refs),
        max_end=max(ends),
    )


class HitTester:
    """
    Hit tester bound to pixel thresholds.

    Args:
        edge_threshold_px: Band at each note end treated as an edge
        handle_radius_px: Pick radius of the transform handles
    """

    def __init__(self, edge_threshold_px: float = EDGE_THRESHOLD_PX,
                 handle_radius_px: float = TRANSFORM_HANDLE_RADIUS_PX):
        self.edge_threshold_px = edge_threshold_px
        self.handle_radius_px = handle_radius_px

    def hit(self, x: float, y: float, grid: Grid, geometry: GridGeometry,
            snap: int, selection: Iterable[CellRef] = ()) -> Hit:
        handle = self.transform_handle_at(x, y, grid, geometry, selection)
        if handle is not None:
            return handle

        row = geometry.row_at(y)
        if geometry.in_gutter(x):
            return GutterHit(row)

        col = snap_column_down(geometry.column_at(x), snap)
        covering = covering_note(grid, row, col)
        if covering is None:
            return EmptyHit(row, col)

        start, note = covering
        relative_x = (geometry.column_float(x) - start) * geometry.step_width
        if relative_x < self.edge_threshold_px:
            left = note_ending_at(grid, row, start)
            if left is not None:
                return BoundaryHit(row, left[0], left[1], start, note)
            return NoteEdgeHit(row, start, note, EdgeSide.LEFT)
        if relative_x > note.duration * geometry.step_width - self.edge_threshold_px:
            end = start + note.duration
            right = note_at(grid, row, end)
            if right is not None:
                return BoundaryHit(row, start, note, end, right)
            return NoteEdgeHit(row, start, note, EdgeSide.RIGHT)
        return NoteBodyHit(row, start, note)

    def transform_handle_at(self, x: float, y: float, grid: Grid, geometry: GridGeometry,
                            selection: Iterable[CellRef]) -> Optional[TransformHandleHit]:
        bounds = selection_bounds(grid, selection)
        if bounds is None:
            return None
        for side in (EdgeSide.LEFT, EdgeSide.RIGHT):
            hx, hy = bounds.handle_point(side, geometry)
            if math.hypot(x - hx, y - hy) <= self.handle_radius_px:
                return TransformHandleHit(side)
        return None


def hit_test(x: float, y: float, grid: Grid, geometry: GridGeometry, snap: int,
             selection: Iterable[CellRef] = ()) -> Hit:
    """Hit test with the default thresholds."""
    return HitTester().hit(x, y, grid, geometry, snap, selection)
