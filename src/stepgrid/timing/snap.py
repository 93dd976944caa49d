"""
Snap Calculator

Quantizes columns, durations and octave shifts for pointer edits.

Design:
- Snap denominator is a step count: 1, 2 or 4
- Start columns snap DOWN (the cell under the pointer owns the press)
- Drawn durations round UP from a minimum of 1
- Stretch targets round to the NEAREST multiple
- All results are clamped into the pattern
"""

import math

from ..constants import MAX_OCTAVE_SHIFT, MIN_OCTAVE_SHIFT, STEPS_PER_PATTERN, VALID_SNAPS


def validate_snap(snap: int) -> int:
    if snap not in VALID_SNAPS:
        raise ValueError(f"Snap must be one of {VALID_SNAPS} (got {snap})")
    return snap


def clamp(value, low, high):
    return max(low, min(high, value))


def snap_column_down(col: int, snap: int) -> int:
    return (col // snap) * snap


def round_duration_up(duration: int, snap: int) -> int:
    """Round a duration up to a multiple of snap, never below one snap unit."""
    return math.ceil(max(1, duration) / snap) * snap


def snap_nearest(value: float, snap: int) -> int:
    """Nearest multiple of snap; exact halves round up."""
    return int(math.floor(value / snap + 0.5)) * snap


def clamp_row(row: int, row_count: int) -> int:
    return clamp(row, 0, max(0, row_count - 1))


def clamp_start(col: int, duration: int, steps: int = STEPS_PER_PATTERN) -> int:
    """Start column such that [col, col+duration) stays inside the pattern."""
    return clamp(col, 0, max(0, steps - duration))


def clamp_duration(duration: int, col: int, steps: int = STEPS_PER_PATTERN) -> int:
    return clamp(duration, 1, max(1, steps - col))


def clamp_octave(octave: int) -> int:
    return clamp(octave, MIN_OCTAVE_SHIFT, MAX_OCTAVE_SHIFT)
