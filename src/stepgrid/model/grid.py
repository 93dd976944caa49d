"""
Grid helpers

Read/replace operations over the immutable Grid (tuple of rows of
Note-or-None). A note lives in its start cell; the cells it covers after
the first are None.

All lookups are bounds-safe: out-of-range or ragged rows read as empty.
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..constants import STEPS_PER_PATTERN
from ..types import CellRef, Grid, Note


def empty_grid(rows: int, steps: int = STEPS_PER_PATTERN) -> Grid:
    return tuple((None,) * steps for _ in range(rows))


def to_grid(rows: Iterable[Sequence[Optional[Note]]]) -> Grid:
    """Freeze nested sequences into a Grid."""
    return tuple(tuple(row) for row in rows)


def note_at(grid: Grid, row: int, col: int) -> Optional[Note]:
    """The note starting exactly at (row, col), if any."""
    if row < 0 or row >= len(grid) or col < 0:
        return None
    cells = grid[row]
    if col >= len(cells):
        return None
    return cells[col]


def covering_note(grid: Grid, row: int, col: int) -> Optional[Tuple[int, Note]]:
    """
    Note whose span covers (row, col).

    Returns:
        (start column, note) or None
    """
    if row < 0 or row >= len(grid) or col < 0:
        return None
    cells = grid[row]
    for start in range(min(col, len(cells) - 1), -1, -1):
        note = cells[start]
        if note is not None:
            return (start, note) if start + note.duration > col else None
    return None


def note_ending_at(grid: Grid, row: int, end: int) -> Optional[Tuple[int, Note]]:
    """Note whose span ends exactly at column ``end`` (exclusive end)."""
    if end <= 0:
        return None
    hit = covering_note(grid, row, end - 1)
    if hit is not None and hit[0] + hit[1].duration == end:
        return hit
    return None


def iter_notes(grid: Grid) -> Iterator[Tuple[int, int, Note]]:
    """Yield (row, col, note) for every note, row-major."""
    for r, cells in enumerate(grid):
        for c, note in enumerate(cells):
            if note is not None:
                yield r, c, note


def note_count(grid: Grid) -> int:
    return sum(1 for _ in iter_notes(grid))


def all_cells(grid: Grid) -> List[CellRef]:
    return [CellRef(r, c) for r, c, _ in iter_notes(grid)]


def valid_selection(grid: Grid, selection: Iterable[CellRef]) -> List[CellRef]:
    """Selection entries that still reference a note, in their original order."""
    return [ref for ref in selection if note_at(grid, ref.row, ref.col) is not None]


def row_spans(grid: Grid, row: int) -> List[Tuple[int, int]]:
    """[start, end) spans of the notes in a row."""
    return [(c, c + n.duration) for c, n in enumerate(grid[row]) if n is not None]


def has_overlap(grid: Grid) -> bool:
    """True if any two notes in a row overlap or a note runs past the pattern."""
    for r, cells in enumerate(grid):
        end = 0
        for start, stop in row_spans(grid, r):
            if start < end or stop > len(cells):
                return True
            end = stop
    return False
