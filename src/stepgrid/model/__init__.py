"""
Grid model: immutable grid helpers and the reference grid owner.
"""

from .grid import (
    all_cells,
    covering_note,
    empty_grid,
    has_overlap,
    iter_notes,
    note_at,
    note_count,
    note_ending_at,
    row_spans,
    to_grid,
    valid_selection,
)
from .pattern import PatternDocument

__all__ = [
    'PatternDocument',
    'all_cells',
    'covering_note',
    'empty_grid',
    'has_overlap',
    'iter_notes',
    'note_at',
    'note_count',
    'note_ending_at',
    'row_spans',
    'to_grid',
    'valid_selection',
]
