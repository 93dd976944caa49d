"""
StepGrid demo window.

Usage:
    stepgrid [--rows 15] [--bpm 120] [--snap 1] [--settings PATH]

Environment (.env supported):
    STEPGRID_LOG_LEVEL, STEPGRID_LOG_FILE, STEPGRID_SETTINGS_PATH
"""
import argparse
import sys
from typing import List, Optional

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QApplication, QComboBox, QLabel, QMainWindow, QToolBar

from .constants import VALID_SNAPS
from .core import NoteGridWidget, PlaybackClock
from .env import load_environment
from .logging import GridLog as Log
from .model import PatternDocument
from .settings import EditorSettingsManager
from .types import Note, RowConfig

SCALE = ("C", "D", "E", "F", "G", "A", "B")


def scale_rows(count: int, top_octave: int = 5) -> List[RowConfig]:
    """C-major rows from the top down; every C is a root row."""
    rows = []
    index = len(SCALE) * (top_octave + 1) - 1
    for _ in range(count):
        octave, degree = divmod(index, len(SCALE))
        name = SCALE[degree]
        rows.append(RowConfig(label=f"{name}{octave}", is_root=name == "C"))
        index -= 1
    return rows


class LoggingPreview:
    """Preview sink that only logs; the editor never depends on sound output."""

    def preview_note(self, row: int, note: Optional[Note] = None) -> None:
        octave = note.octave_shift if note is not None else 0
        Log.info(f"Preview: row {row} octave {octave:+d}")

    def stop_preview_note(self) -> None:
        Log.debug("Preview: stop")


class MainWindow(QMainWindow):
    def __init__(self, rows: int, bpm: float, settings_manager: EditorSettingsManager):
        super().__init__()
        self.setWindowTitle("StepGrid")
        self.resize(1100, 640)

        configs = scale_rows(rows)
        self.document = PatternDocument(rows=rows, parent=self)
        self.document.add_note(2, 0, 2)
        self.document.add_note(4, 4, 1)
        self.document.add_note(6, 8, 4)

        self.grid_widget = NoteGridWidget(settings_manager, parent=self)
        self.grid_widget.set_row_configs(configs)
        self.grid_widget.bind(self.document)
        self.grid_widget.set_preview_sink(LoggingPreview())
        self.setCentralWidget(self.grid_widget)

        self.clock = PlaybackClock(bpm=bpm, parent=self)
        self.clock.position_changed.connect(
            lambda step: self.grid_widget.set_playback(step, self.clock.is_playing))
        self.clock.playback_stopped.connect(lambda: self.grid_widget.set_playback(0.0, False))

        self._settings_manager = settings_manager
        self._build_toolbar()
        self.grid_widget.status_message.connect(self._show_status)

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Transport", self)
        self.addToolBar(toolbar)

        play = QAction("Play/Stop", self)
        play.setShortcut(QKeySequence("Space"))
        play.triggered.connect(self.clock.toggle_playback)
        toolbar.addAction(play)

        undo = QAction("Undo", self)
        undo.setShortcut(QKeySequence.StandardKey.Undo)
        undo.triggered.connect(self.document.undo)
        toolbar.addAction(undo)

        redo = QAction("Redo", self)
        redo.setShortcut(QKeySequence.StandardKey.Redo)
        redo.triggered.connect(self.document.redo)
        toolbar.addAction(redo)

        toolbar.addSeparator()
        toolbar.addWidget(QLabel(" Snap 1/"))
        self.snap_box = QComboBox(self)
        for value in VALID_SNAPS:
            self.snap_box.addItem(str(value), value)
        self.snap_box.setCurrentIndex(VALID_SNAPS.index(self._settings_manager.snap))
        self.snap_box.currentIndexChanged.connect(
            lambda i: self.grid_widget.set_snap(self.snap_box.itemData(i)))
        toolbar.addWidget(self.snap_box)

        toolbar.addSeparator()
        reset = QAction("Reset Settings", self)
        reset.triggered.connect(self.reset_settings)
        toolbar.addAction(reset)

    def reset_settings(self) -> None:
        """Restore default editor settings and resync the snap selector."""
        self._settings_manager.reset_to_defaults()
        self.snap_box.setCurrentIndex(VALID_SNAPS.index(self._settings_manager.snap))
        self._show_status("Settings reset to defaults", False)

    def _show_status(self, message: str, is_error: bool) -> None:
        self.statusBar().showMessage(message, 5000 if not is_error else 10000)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="StepGrid note editor demo")
    parser.add_argument("--rows", type=int, default=15, help="Number of pitch rows")
    parser.add_argument("--bpm", type=float, default=120.0, help="Playback tempo")
    parser.add_argument("--snap", type=int, choices=VALID_SNAPS, default=None, help="Snap denominator")
    parser.add_argument("--settings", default=None, help="Settings JSON path")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_environment()
    args = parse_args(argv)

    app = QApplication.instance() or QApplication(sys.argv[:1])
    if args.settings:
        settings_manager = EditorSettingsManager(args.settings)
    else:
        settings_manager = EditorSettingsManager.from_environment()
    if args.snap is not None:
        settings_manager.snap = args.snap

    window = MainWindow(max(1, args.rows), args.bpm, settings_manager)
    window.show()
    Log.info(f"StepGrid: started with {args.rows} rows at {args.bpm:.0f} BPM")
    code = app.exec()
    settings_manager.force_save()
    return code


if __name__ == "__main__":
    sys.exit(main())
