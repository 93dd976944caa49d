"""
StepGrid Package
================

An interactive step-sequencer note grid for PyQt6 applications.
Designed to be **standalone and reusable** - the widget edits a grid it does
not own and reports every edit back to its host.

Directory Structure
-------------------
- core/       - Widget, frame loop, gesture controller, snapshot store
- editing/    - Hit testing, interaction states, state machine, commits
- timing/     - Snap maths and grid geometry
- render/     - Frame renderer and style
- settings/   - Validated settings schema and JSON-backed manager
- model/      - Grid helpers and a reference grid owner with undo history

Import Examples
---------------
    from stepgrid.core import NoteGridWidget
    from stepgrid.model import PatternDocument
    from stepgrid.types import Note, RowConfig, CellRef
    from stepgrid.interfaces import GridOwnerInterface, PreviewInterface
    from stepgrid.settings import EditorSettings, EditorSettingsManager

Features
--------
- Draw, move, resize, clone, split and merge notes with the pointer
- Multi-select with marquee, group move/resize/copy and proportional stretch
- Rolling edits on the boundary between two touching notes
- Wheel octave shift while a gesture is active
- Row gutter strumming with audio preview hints
- 60 FPS render loop reading a single-writer snapshot
"""

__version__ = "1.0.0"
