"""
Editor Snapshot

Single-writer hand-off between input handling and the frame loop.

Input handlers build a new frozen EditorSnapshot and publish it; the
renderer reads ``store.current`` once per frame and paints from that one
value. Nothing in a snapshot is ever mutated, so the reader cannot observe
a half-applied update and needs no lock.
"""

from dataclasses import dataclass, replace
from typing import Tuple

from ..editing.states import Idle, InteractionState
from ..timing.geometry import GridGeometry
from ..types import CellRef, EditMode, Grid, RowConfig


@dataclass(frozen=True)
class EditorSnapshot:
    """
    Everything one frame needs.

    Attributes:
        grid: Owner's grid
        row_configs: Per-row label/colour metadata
        selection: Owner's selection (may reference stale cells)
        interaction: Active gesture state
        geometry: Cell size, scroll and view size
        snap: Active snap denominator
        mode: Held edit mode
        playback_step: Playhead position in steps (fractional), < 0 when unknown
        is_playing: Transport running
    """
    grid: Grid = ()
    row_configs: Tuple[RowConfig, ...] = ()
    selection: Tuple[CellRef, ...] = ()
    interaction: InteractionState = Idle()
    geometry: GridGeometry = GridGeometry()
    snap: int = 1
    mode: EditMode = EditMode.NORMAL
    playback_step: float = -1.0
    is_playing: bool = False


class SnapshotStore:
    """Holds the latest snapshot. Only the input side calls publish()."""

    def __init__(self, initial: EditorSnapshot = None):
        self._current = initial if initial is not None else EditorSnapshot()
        self._version = 0

    @property
    def current(self) -> EditorSnapshot:
        return self._current

    @property
    def version(self) -> int:
        """Bumped on every publish; lets the frame loop skip identical frames."""
        return self._version

    def publish(self, **changes) -> EditorSnapshot:
        if not changes:
            return self._current
        self._current = replace(self._current, **changes)
        self._version += 1
        return self._current
