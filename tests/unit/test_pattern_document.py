"""
Tests for the reference grid owner (PatternDocument).
"""
import pytest

from stepgrid.model import PatternDocument, has_overlap, note_count
from stepgrid.types import AddRequest, CellRef, MoveRequest, Note


@pytest.fixture
def doc(qapp, make_grid):
    def _doc(notes=None, rows=4, **kwargs):
        return PatternDocument(grid=make_grid(rows, notes), **kwargs)
    return _doc


class TestToggle:
    """toggle_note adds or removes a note at its start cell."""

    def test_toggle_adds_one_step_note(self, doc):
        d = doc()
        d.toggle_note(1, 3)
        assert d.note_at(1, 3) == Note(duration=1)

    def test_toggle_twice_restores_grid(self, doc):
        d = doc({(0, 0): 2})
        before = d.grid
        d.toggle_note(2, 5)
        d.toggle_note(2, 5)
        assert d.grid == before

    def test_toggle_removes_note_and_selection(self, doc):
        d = doc({(1, 1): 2})
        d.select_notes([CellRef(1, 1)])
        d.toggle_note(1, 1)
        assert d.note_at(1, 1) is None
        assert d.selection == []

    def test_toggle_on_covered_cell_is_ignored(self, doc):
        d = doc({(1, 1): 3})
        before = d.grid
        d.toggle_note(1, 2)
        assert d.grid == before

    def test_toggle_outside_grid_ignored(self, doc):
        d = doc()
        before = d.grid
        d.toggle_note(9, 0)
        assert d.grid == before

    def test_default_octave_applied(self, doc):
        d = doc(default_octave_shift=-1)
        d.toggle_note(0, 0)
        assert d.note_at(0, 0).octave_shift == -1


class TestAdd:
    """Adding notes keeps them inside the pattern and non-overlapping."""

    def test_add_clamps_duration(self, doc):
        d = doc()
        d.add_note(0, 14, 8)
        assert d.note_at(0, 14).duration == 2

    def test_data_overrides_defaults(self, doc):
        d = doc(default_octave_shift=1)
        d.add_note(0, 0, 2, {'octave_shift': -2, 'color': (9, 9, 9), 'bogus': 1})
        note = d.note_at(0, 0)
        assert (note.octave_shift, note.color) == (-2, (9, 9, 9))

    def test_placed_note_wins_overlap(self, doc):
        d = doc({(0, 0): 4, (0, 6): 2})
        d.add_note(0, 2, 5)
        assert d.note_at(0, 0).duration == 2
        assert d.note_at(0, 2).duration == 5
        assert d.note_at(0, 6) is None
        assert not has_overlap(d.grid)

    def test_add_notes_batch_is_one_edit(self, doc):
        d = doc()
        messages = []
        d.status_message.connect(lambda msg, err: messages.append(msg))
        d.add_notes([AddRequest(0, 0), AddRequest(1, 2, 2), AddRequest(9, 9)])
        assert note_count(d.grid) == 2
        assert messages == ["Added 2 notes"]
        d.undo()
        assert note_count(d.grid) == 0


class TestCommit:
    """commit_note / commit_multi_note / copy_multi_note."""

    def test_commit_moves_note_and_selection(self, doc):
        d = doc({(1, 3): Note(duration=2, octave_shift=1)})
        d.select_notes([CellRef(1, 3)])
        d.commit_note(1, 3, 2, 6, {'duration': 3})
        assert d.note_at(1, 3) is None
        assert d.note_at(2, 6) == Note(duration=3, octave_shift=1)
        assert d.selection == [CellRef(2, 6)]

    def test_commit_missing_source_ignored(self, doc):
        d = doc()
        before = d.grid
        d.commit_note(0, 0, 1, 1)
        assert d.grid == before

    def test_commit_clamps_target(self, doc):
        d = doc({(0, 0): 4})
        d.commit_note(0, 0, 10, 15)
        assert d.note_at(3, 12).duration == 4

    def test_multi_notes_can_swap(self, doc):
        d = doc({(0, 0): Note(duration=1, octave_shift=1), (0, 4): Note(duration=1, octave_shift=-1)})
        d.commit_multi_note([MoveRequest(0, 0, 0, 4), MoveRequest(0, 4, 0, 0)])
        assert d.note_at(0, 4).octave_shift == 1
        assert d.note_at(0, 0).octave_shift == -1

    def test_split_requests_share_source(self, doc):
        d = doc({(0, 2): 4})
        d.select_notes([CellRef(0, 2)])
        d.commit_multi_note([
            MoveRequest(0, 2, 0, 2, {'duration': 2}),
            MoveRequest(0, 2, 0, 4, {'duration': 2}),
        ])
        assert d.note_at(0, 2).duration == 2
        assert d.note_at(0, 4).duration == 2
        assert d.selection == [CellRef(0, 2), CellRef(0, 4)]

    def test_rolling_edit_preserves_metadata(self, doc):
        left = Note(duration=2, color=(1, 1, 1))
        right = Note(duration=3, octave_shift=2)
        d = doc({(0, 2): left, (0, 4): right})
        d.commit_multi_note([
            MoveRequest(0, 2, 0, 2, {'duration': 4}),
            MoveRequest(0, 4, 0, 6, {'duration': 1}),
        ])
        assert d.note_at(0, 2) == Note(duration=4, color=(1, 1, 1))
        assert d.note_at(0, 6) == Note(duration=1, octave_shift=2)

    def test_copy_leaves_sources_and_selects_copies(self, doc):
        d = doc({(0, 0): 1, (1, 0): 1})
        d.copy_multi_note([MoveRequest(0, 0, 0, 8), MoveRequest(1, 0, 1, 8)])
        assert note_count(d.grid) == 4
        assert d.selection == [CellRef(0, 8), CellRef(1, 8)]

    def test_update_note(self, doc):
        d = doc({(0, 0): 1})
        d.update_note(0, 0, {'octave_shift': 5})
        assert d.note_at(0, 0).octave_shift == 3


class TestSelectionAndHistory:
    """Selection filtering and undo/redo."""

    def test_selection_filtered_to_notes(self, doc):
        d = doc({(0, 0): 1})
        d.select_notes([CellRef(0, 0), CellRef(0, 0), CellRef(2, 2)])
        assert d.selection == [CellRef(0, 0)]

    def test_select_all(self, doc):
        d = doc({(0, 0): 1, (3, 5): 2})
        d.select_all()
        assert d.selection == [CellRef(0, 0), CellRef(3, 5)]

    def test_undo_redo(self, doc):
        d = doc()
        d.toggle_note(0, 0)
        assert d.undo()
        assert d.note_at(0, 0) is None
        assert d.redo()
        assert d.note_at(0, 0) is not None

    def test_nothing_to_undo(self, doc):
        d = doc()
        assert not d.undo()
        assert not d.redo()

    def test_history_bounded(self, doc):
        d = doc(max_undo_steps=3)
        for col in range(6):
            d.toggle_note(0, col)
        undone = 0
        while d.undo():
            undone += 1
        assert undone == 3

    def test_signals(self, doc):
        d = doc()
        grids, selections = [], []
        d.grid_changed.connect(grids.append)
        d.selection_changed.connect(selections.append)
        d.toggle_note(0, 0)
        d.select_notes([CellRef(0, 0)])
        assert len(grids) == 1
        assert selections == [[CellRef(0, 0)]]
