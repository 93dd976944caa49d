"""
Render Module

QPainter rendering of editor snapshots.
"""

from .renderer import NoteGridRenderer, offscreen_distance, pulse_alpha, pulse_frequency
from .style import GridStyle, adjust_color, with_alpha

__all__ = [
    'NoteGridRenderer',
    'GridStyle',
    'adjust_color',
    'with_alpha',
    'offscreen_distance',
    'pulse_alpha',
    'pulse_frequency',
]
