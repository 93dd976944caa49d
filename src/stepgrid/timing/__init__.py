"""
Timing Module

Quantization and pixel/cell mapping.
"""

from .geometry import GridGeometry
from .snap import (
    clamp,
    clamp_duration,
    clamp_octave,
    clamp_row,
    clamp_start,
    round_duration_up,
    snap_column_down,
    snap_nearest,
    validate_snap,
)

__all__ = [
    'GridGeometry',
    'clamp',
    'clamp_duration',
    'clamp_octave',
    'clamp_row',
    'clamp_start',
    'round_duration_up',
    'snap_column_down',
    'snap_nearest',
    'validate_snap',
]
