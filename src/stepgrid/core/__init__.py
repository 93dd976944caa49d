"""
Core Module

Widget-level plumbing for the grid editor:
- snapshot: single-writer frame hand-off
- frame_loop: display-rate repaint scheduler
- playback: demo step clock
- controller: input -> gestures -> commits
- widget: the QWidget tying it together
"""

from .snapshot import EditorSnapshot, SnapshotStore
from .frame_loop import FrameLoop
from .playback import PlaybackClock
from .controller import GestureController, cursor_for
from .widget import NoteGridWidget

__all__ = [
    'EditorSnapshot',
    'SnapshotStore',
    'FrameLoop',
    'PlaybackClock',
    'GestureController',
    'cursor_for',
    'NoteGridWidget',
]
