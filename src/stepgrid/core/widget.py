"""
Note Grid Widget
================

Self-contained step-grid note editor widget.

Drop into any panel or window. Owns the gesture controller, the snapshot
store, the frame loop and the renderer; the grid itself is owned by the
host and passed in with set_grid(). Committed edits leave the widget as
signals (the widget implements GridOwnerInterface by forwarding), or go
straight to a PatternDocument after bind().

Uses:
- GestureController for pointer/keyboard gestures
- FrameLoop to repaint at display rate
- NoteGridRenderer to paint each frame from the current snapshot
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from PyQt6.QtCore import QEvent, Qt, pyqtSignal
from PyQt6.QtGui import QInputDevice, QPainter
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ..editing.capture import PointerCapture
from ..interfaces import PreviewInterface
from ..logging import GridLog as Log
from ..render.renderer import NoteGridRenderer
from ..render.style import GridStyle
from ..settings.editor import EditorSettings, EditorSettingsManager
from ..types import AddRequest, CellRef, Grid, Modifiers, MoveRequest, PointerEvent, PointerKind, RowConfig
from .controller import GestureController
from .frame_loop import FrameLoop
from .snapshot import SnapshotStore


def modifiers_from_qt(flags) -> Modifiers:
    return Modifiers(
        ctrl=bool(flags & Qt.KeyboardModifier.ControlModifier),
        meta=bool(flags & Qt.KeyboardModifier.MetaModifier),
        alt=bool(flags & Qt.KeyboardModifier.AltModifier),
        shift=bool(flags & Qt.KeyboardModifier.ShiftModifier),
    )


def key_name(key: int) -> Optional[str]:
    """Qt key code -> member name ('Key_R'), None for codes Qt does not name."""
    try:
        return Qt.Key(key).name
    except ValueError:
        return None


class NoteGridWidget(QWidget):
    """
    Grid note editor.

    Signals (the owner contract, forwarded):
        note_toggled(row, col)
        note_added(row, col, duration, data)
        notes_added(requests)
        note_committed(from_row, from_col, to_row, to_col, data)
        notes_committed(requests)
        notes_copied(requests)
        selection_requested(cells)
        status_message(message, is_error)
    """

    note_toggled = pyqtSignal(int, int)
    note_added = pyqtSignal(int, int, int, object)
    notes_added = pyqtSignal(list)
    note_committed = pyqtSignal(int, int, int, int, object)
    notes_committed = pyqtSignal(list)
    notes_copied = pyqtSignal(list)
    selection_requested = pyqtSignal(list)
    status_message = pyqtSignal(str, bool)

    def __init__(self, settings_manager: Optional[EditorSettingsManager] = None,
                 style=GridStyle, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._settings_manager = settings_manager
        settings = settings_manager.settings if settings_manager is not None else EditorSettings()

        self._store = SnapshotStore()
        self._controller = GestureController(
            owner=self,
            settings=settings,
            store=self._store,
            capture_factory=lambda on_lost: PointerCapture(on_lost),
            parent=self,
        )
        self._renderer = NoteGridRenderer(
            style=style,
            pulse_min_hz=settings.pulse_min_hz,
            pulse_max_hz=settings.pulse_max_hz,
            handle_radius_px=settings.handle_radius_px,
        )
        self._frame_loop = FrameLoop(self._store, self.update, settings.frame_interval_ms, parent=self)

        self._controller.status_message.connect(self.status_message.emit)
        self._controller.cursor_changed.connect(self.setCursor)
        if settings_manager is not None:
            settings_manager.settings_changed.connect(self._on_settings_changed)
            settings_manager.settings_loaded.connect(lambda: self._on_settings_changed(""))

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(320, 160)

        self._document = None
        self._frame_loop.start()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def controller(self) -> GestureController:
        return self._controller

    @property
    def renderer(self) -> NoteGridRenderer:
        return self._renderer

    @property
    def frame_loop(self) -> FrameLoop:
        return self._frame_loop

    @property
    def store(self) -> SnapshotStore:
        return self._store

    # =========================================================================
    # Host API
    # =========================================================================

    def set_grid(self, grid: Grid) -> None:
        self._controller.set_grid(grid)

    def set_selection(self, cells: Iterable[CellRef]) -> None:
        self._controller.set_selection(cells)

    def set_row_configs(self, configs: Iterable[RowConfig]) -> None:
        self._controller.set_row_configs(configs)

    def set_snap(self, snap: int) -> None:
        if self._settings_manager is not None:
            self._settings_manager.snap = snap
        else:
            self._controller.set_snap(snap)

    def set_playback(self, step: float, is_playing: bool = True) -> None:
        self._controller.set_playback(step, is_playing)

    def set_preview_sink(self, sink: Optional[PreviewInterface]) -> None:
        self._controller.preview.sink = sink

    def bind(self, document) -> None:
        """
        Wire a PatternDocument (or any owner with the same signals) both ways.

        Commits go straight to the document; its grid and selection changes
        flow back into the snapshot.
        """
        self._document = document
        self._controller.owner = document
        document.grid_changed.connect(self.set_grid)
        document.selection_changed.connect(self.set_selection)
        document.status_message.connect(self.status_message.emit)
        self.set_grid(document.grid)
        self.set_selection(document.selection)
        Log.info(f"NoteGridWidget: bound to document with {document.row_count} rows")

    def _on_settings_changed(self, name: str) -> None:
        settings = self._settings_manager.settings
        self._controller.apply_settings(settings)
        self._renderer.pulse_min_hz = settings.pulse_min_hz
        self._renderer.pulse_max_hz = settings.pulse_max_hz
        self._renderer.handle_radius_px = settings.handle_radius_px
        self._frame_loop.set_interval(settings.frame_interval_ms)
        self._frame_loop.invalidate()

    # =========================================================================
    # GridOwnerInterface (forwarded as signals when no document is bound)
    # =========================================================================

    def toggle_note(self, row: int, col: int) -> None:
        self.note_toggled.emit(row, col)

    def add_note(self, row: int, col: int, duration: int,
                 data: Optional[Mapping[str, Any]] = None) -> None:
        self.note_added.emit(row, col, duration, dict(data or {}))

    def add_notes(self, requests: Sequence[AddRequest]) -> None:
        self.notes_added.emit(list(requests))

    def commit_note(self, from_row: int, from_col: int, to_row: int, to_col: int,
                    data: Optional[Mapping[str, Any]] = None) -> None:
        self.note_committed.emit(from_row, from_col, to_row, to_col, dict(data or {}))

    def commit_multi_note(self, requests: Sequence[MoveRequest]) -> None:
        self.notes_committed.emit(list(requests))

    def copy_multi_note(self, requests: Sequence[MoveRequest]) -> None:
        self.notes_copied.emit(list(requests))

    def select_notes(self, cells: List[CellRef]) -> None:
        self.selection_requested.emit(list(cells))

    # =========================================================================
    # Qt events
    # =========================================================================

    def _pointer(self, event) -> PointerEvent:
        pos = event.position()
        return PointerEvent(
            x=pos.x(),
            y=pos.y(),
            time_ms=float(event.timestamp()),
            modifiers=modifiers_from_qt(event.modifiers()),
        )

    @staticmethod
    def _from_touchscreen(event) -> bool:
        device = event.device()
        return device is not None and device.type() == QInputDevice.DeviceType.TouchScreen

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or self._from_touchscreen(event):
            super().mousePressEvent(event)
            return
        self.setFocus(Qt.FocusReason.MouseFocusReason)
        self._controller.pointer_down(self._pointer(event))
        event.accept()

    def mouseMoveEvent(self, event):
        if self._from_touchscreen(event):
            super().mouseMoveEvent(event)
            return
        self._controller.pointer_move(self._pointer(event))
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or self._from_touchscreen(event):
            super().mouseReleaseEvent(event)
            return
        self._controller.pointer_up(self._pointer(event))
        event.accept()

    def leaveEvent(self, event):
        self._controller.pointer_left()
        super().leaveEvent(event)

    def event(self, event):
        kind = event.type()
        if kind in (QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate, QEvent.Type.TouchEnd):
            self._touch_event(event)
            event.accept()
            return True
        if kind == QEvent.Type.TouchCancel:
            self._controller.cancel("touch cancelled")
            event.accept()
            return True
        return super().event(event)

    def _touch_event(self, event) -> None:
        modifiers = modifiers_from_qt(event.modifiers())
        for point in event.points():
            pos = point.position()
            sample = PointerEvent(
                x=pos.x(), y=pos.y(),
                time_ms=float(event.timestamp()),
                pointer_id=point.id(),
                kind=PointerKind.TOUCH,
                modifiers=modifiers,
            )
            state = point.state()
            if state == point.State.Pressed:
                self._controller.pointer_down(sample)
            elif state == point.State.Released:
                self._controller.pointer_up(sample)
            elif state == point.State.Updated:
                self._controller.pointer_move(sample)

    def wheelEvent(self, event):
        delta = event.angleDelta()
        handled = self._controller.wheel(
            float(delta.y()), float(delta.x()), modifiers_from_qt(event.modifiers()))
        if handled:
            event.accept()
        else:
            super().wheelEvent(event)

    def keyPressEvent(self, event):
        name = key_name(event.key())
        if name is not None and self._controller.key_press(
                name, modifiers_from_qt(event.modifiers()), event.isAutoRepeat()):
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        name = key_name(event.key())
        if name is not None and self._controller.key_release(name, event.isAutoRepeat()):
            event.accept()
            return
        super().keyReleaseEvent(event)

    def focusOutEvent(self, event):
        # Held modes end when focus goes elsewhere
        self._controller.key_release(self._controller.settings.shortcut_razor_mode)
        self._controller.key_release(self._controller.settings.shortcut_pen_mode)
        super().focusOutEvent(event)

    def resizeEvent(self, event):
        size = event.size()
        self._controller.resize(size.width(), size.height())
        super().resizeEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            self._renderer.paint(painter, self._store.current, self.width(), self.height(),
                                 self._frame_loop.now())
        finally:
            painter.end()

    def closeEvent(self, event):
        self._controller.cancel("widget closed")
        self._frame_loop.stop()
        super().closeEvent(event)
