"""
Tests for audio preview hints.
"""
from dataclasses import replace
from unittest.mock import MagicMock

from stepgrid.editing.preview import PreviewBridge, preview_for
from stepgrid.editing.states import Drawing, Idle, Moving, MovingGroup, Selecting, Strumming
from stepgrid.interfaces import PreviewInterface
from stepgrid.types import CellRef, Note


def drawing(**kwargs):
    return Drawing(row=kwargs.pop('row', 1), col=0, start_x=0, start_y=0, started_ms=0, **kwargs)


class TestPreviewFor:
    """Which row/note a gesture sounds."""

    def test_drawing_previews_its_row(self):
        row, note = preview_for(drawing(octave_shift=1), 8)
        assert row == 1
        assert note.octave_shift == 1

    def test_moving_previews_clamped_target_row(self):
        state = Moving(row=1, col=0, note=Note(duration=2), to_row=20, to_col=0,
                       start_x=0, start_y=0, started_ms=0)
        row, note = preview_for(state, 8)
        assert row == 7
        assert note.duration == 2

    def test_group_previews_anchor_row(self):
        state = MovingGroup(members=(CellRef(2, 0),), anchor=CellRef(2, 0), delta_row=1,
                            start_x=0, start_y=0, started_ms=0)
        assert preview_for(state, 8) == (3, None)
        row, note = preview_for(replace(state, octave_delta=-1), 8)
        assert note.octave_shift == -1

    def test_strum(self):
        assert preview_for(Strumming(row=4, start_x=0, start_y=0, started_ms=0), 8) == (4, None)

    def test_silent_gestures(self):
        assert preview_for(Idle(), 8) is None
        assert preview_for(Selecting(x2=0, y2=0, start_x=0, start_y=0, started_ms=0), 8) is None
        assert preview_for(drawing(), 0) is None


class TestPreviewBridge:
    """Previews are de-duplicated and always stopped."""

    def test_fires_once_per_row(self):
        sink = MagicMock(spec=PreviewInterface)
        bridge = PreviewBridge(sink)
        bridge.update(drawing(), 8)
        bridge.update(drawing(duration=3), 8)
        sink.preview_note.assert_called_once()
        assert bridge.sounding

    def test_refires_on_row_or_octave_change(self):
        sink = MagicMock(spec=PreviewInterface)
        bridge = PreviewBridge(sink)
        bridge.update(drawing(), 8)
        bridge.update(drawing(row=2), 8)
        bridge.update(drawing(row=2, octave_shift=1), 8)
        assert sink.preview_note.call_count == 3

    def test_stop(self):
        sink = MagicMock(spec=PreviewInterface)
        bridge = PreviewBridge(sink)
        bridge.update(drawing(), 8)
        bridge.stop()
        bridge.stop()
        sink.stop_preview_note.assert_called_once()
        assert not bridge.sounding

    def test_no_sink_is_fine(self):
        bridge = PreviewBridge()
        bridge.update(drawing(), 8)
        bridge.stop()

    def test_swapping_sink_stops_previous(self):
        first = MagicMock(spec=PreviewInterface)
        bridge = PreviewBridge(first)
        bridge.update(drawing(), 8)
        bridge.sink = MagicMock(spec=PreviewInterface)
        first.stop_preview_note.assert_called_once()
