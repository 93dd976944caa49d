"""
Editing Module

Pointer gesture recognition for the note grid:
- hit_test: what the pointer is over
- states: one frozen value per gesture
- machine: pure press/move/wheel/pinch transitions
- targets: clamped placements shared by previews and commits
- commit: final state -> one owner request
- capture: scoped application-wide capture while a gesture is active
- preview: de-duplicated audio hints
"""

from .capture import PointerCapture
from .commit import (
    AddNote, AddNotes, CommitMultiNote, CommitNote, CommitProtocol, CopyMultiNote,
    SelectNotes, ToggleNote, dispatch,
)
from .hit_test import (
    BoundaryHit, EdgeSide, EmptyHit, GutterHit, HitTester, NoteBodyHit, NoteEdgeHit,
    TransformHandleHit, hit_test, selection_bounds,
)
from .machine import GestureContext, move, pinch, press, start_pinch, still_valid, wheel
from .preview import PreviewBridge, preview_for
from .states import (
    Drawing, GestureState, Idle, InteractionState, Merging, Moving, MovingGroup, PenStroke,
    ResizingLeft, ResizingLeftGroup, ResizingRight, ResizingRightGroup, RollingEdit,
    Selecting, Splitting, Stretching, Strumming,
)

__all__ = [
    # Hit testing
    'HitTester', 'hit_test', 'selection_bounds', 'EdgeSide',
    'GutterHit', 'EmptyHit', 'NoteBodyHit', 'NoteEdgeHit', 'BoundaryHit', 'TransformHandleHit',
    # States
    'InteractionState', 'GestureState', 'Idle', 'Drawing', 'PenStroke', 'Moving',
    'ResizingLeft', 'ResizingRight', 'MovingGroup', 'ResizingLeftGroup', 'ResizingRightGroup',
    'Stretching', 'RollingEdit', 'Selecting', 'Strumming', 'Splitting', 'Merging',
    # Machine
    'GestureContext', 'press', 'move', 'wheel', 'start_pinch', 'pinch', 'still_valid',
    # Commits
    'CommitProtocol', 'dispatch', 'ToggleNote', 'AddNote', 'AddNotes', 'CommitNote',
    'CommitMultiNote', 'CopyMultiNote', 'SelectNotes',
    # Side channels
    'PointerCapture', 'PreviewBridge', 'preview_for',
]
