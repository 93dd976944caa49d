"""
Shared fixtures for the StepGrid test suite.

Qt runs offscreen so widget/painter tests work without a display.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("STEPGRID_LOG_LEVEL", "WARNING")

import pytest

from stepgrid.model.grid import empty_grid, to_grid
from stepgrid.timing.geometry import GridGeometry
from stepgrid.types import Note

ROW_HEIGHT = 40
STEP_WIDTH = 60
LABEL_WIDTH = 80


@pytest.fixture(scope="session")
def qapp():
    """Ensure a QApplication exists for signals, timers and painting."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def make_grid():
    """
    Build a Grid from {(row, col): Note or duration}.

    Example:
        grid = make_grid(4, {(0, 2): 2, (1, 0): Note(duration=1, octave_shift=1)})
    """
    def _make(rows, notes=None, steps=16):
        cells = [list(row) for row in empty_grid(rows, steps)]
        for (r, c), value in (notes or {}).items():
            cells[r][c] = value if isinstance(value, Note) else Note(duration=value)
        return to_grid(cells)
    return _make


@pytest.fixture
def geometry():
    """8 rows x 16 steps, 40px rows, 60px steps, 80px gutter, no scroll."""
    return GridGeometry(
        row_height=ROW_HEIGHT,
        step_width=STEP_WIDTH,
        label_width=LABEL_WIDTH,
        row_count=8,
        steps=16,
        view_width=LABEL_WIDTH + 16 * STEP_WIDTH,
        view_height=8 * ROW_HEIGHT,
    )


def cell_center(row, col):
    """Screen point at the middle of a cell in the default geometry."""
    return LABEL_WIDTH + col * STEP_WIDTH + STEP_WIDTH / 2, row * ROW_HEIGHT + ROW_HEIGHT / 2


@pytest.fixture
def center():
    return cell_center
