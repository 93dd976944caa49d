"""
Preview Bridge

Fire-and-forget audio hints for the sound collaborator. Independent of
commits: a preview fires when a gesture first lands on a row or octave and
again only when either changes; it stops when the gesture ends.
"""

from typing import Optional, Tuple

from ..logging import GridLog as Log
from ..interfaces import PreviewInterface
from ..timing.snap import clamp_octave, clamp_row
from ..types import Note
from .states import Drawing, InteractionState, Moving, MovingGroup, PenStroke, Strumming
from .targets import note_with

# (row, note) sent to the collaborator
PreviewRequest = Tuple[int, Optional[Note]]


def preview_for(state: InteractionState, row_count: int) -> Optional[PreviewRequest]:
    """What the active gesture should be sounding, if anything."""
    if row_count <= 0:
        return None
    if isinstance(state, Drawing):
        return state.row, Note(duration=state.duration, octave_shift=state.octave_shift)
    if isinstance(state, Moving):
        return clamp_row(state.to_row, row_count), note_with(state.note, octave_shift=state.octave_shift)
    if isinstance(state, MovingGroup):
        # Anchor note stands in for the group
        row = clamp_row(state.anchor.row + state.delta_row, row_count)
        return row, Note(octave_shift=clamp_octave(state.octave_delta)) if state.octave_delta else None
    if isinstance(state, Strumming):
        return state.row, Note(octave_shift=state.octave_shift) if state.octave_shift else None
    if isinstance(state, PenStroke):
        cell = state.cells[-1]
        return cell.row, Note(duration=state.duration, octave_shift=state.octave_shift)
    return None


class PreviewBridge:
    """
    De-duplicating forwarder to a PreviewInterface.

    A preview is re-sent when the row or octave shift changes, not on every
    pointer sample.
    """

    def __init__(self, sink: Optional[PreviewInterface] = None):
        self._sink = sink
        self._last: Optional[Tuple[int, int]] = None

    @property
    def sink(self) -> Optional[PreviewInterface]:
        return self._sink

    @sink.setter
    def sink(self, value: Optional[PreviewInterface]):
        self.stop()
        self._sink = value

    @property
    def sounding(self) -> bool:
        return self._last is not None

    def update(self, state: InteractionState, row_count: int) -> None:
        request = preview_for(state, row_count)
        if request is None:
            return
        row, note = request
        key = (row, note.octave_shift if note is not None else 0)
        if key == self._last:
            return
        self._last = key
        if self._sink is not None:
            Log.debug(f"PreviewBridge: preview row {row} octave {key[1]}")
            self._sink.preview_note(row, note)

    def stop(self) -> None:
        if self._last is None:
            return
        self._last = None
        if self._sink is not None:
            self._sink.stop_preview_note()
