"""
Gesture Controller

Single input-side writer of the editor snapshot. Feeds pointer, wheel and
key input through the gesture machine and, at the end of each gesture,
sends exactly one commit to the grid owner.

State Machine:

    Idle ──pointer_down──> <gesture> ──pointer_move──> <gesture>
                               |                           |
                          pointer_up                  cancel / capture lost /
                               |                      resize / note vanished
                               v                           v
                     commit -> owner, Idle            Idle (no commit)

While a gesture is active a PointerCapture is held; it is released on every
path back to Idle, including when a handler raises.

Signals:
    gesture_started(str): State name of the new gesture
    gesture_finished(str, object): State name and the commit sent (or None)
    gesture_abandoned(str, str): State name and reason
    status_message(str, bool): message, is_error
    cursor_changed(object): Qt.CursorShape for the widget
"""

from typing import Callable, Dict, Iterable, Optional, Tuple

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from ..interfaces import GridOwnerInterface, PreviewInterface
from ..logging import GridLog as Log
from ..model.grid import all_cells, to_grid
from ..editing.capture import PointerCapture
from ..editing.commit import CommitProtocol, dispatch
from ..editing.hit_test import (
    BoundaryHit, EmptyHit, GutterHit, HitTester, NoteBodyHit, NoteEdgeHit, TransformHandleHit,
)
from ..editing.machine import (
    GestureContext, move, pinch, pointer_distance, press, start_pinch, still_valid, wheel,
)
from ..editing.preview import PreviewBridge
from ..editing.states import GestureState, Idle, InteractionState, Moving, MovingGroup, Stretching
from ..settings.editor import EditorSettings
from ..timing.geometry import GridGeometry
from ..timing.snap import validate_snap
from ..types import CellRef, EditMode, Grid, Modifiers, PointerEvent, PointerKind, RowConfig
from .snapshot import EditorSnapshot, SnapshotStore

CaptureFactory = Callable[[Callable[[str], None]], PointerCapture]


def cursor_for(hit, mode: EditMode) -> Qt.CursorShape:
    """Cursor shape for what the pointer hovers."""
    if isinstance(hit, TransformHandleHit):
        return Qt.CursorShape.SizeHorCursor
    if isinstance(hit, GutterHit):
        return Qt.CursorShape.SizeVerCursor
    if mode is EditMode.RAZOR:
        if isinstance(hit, (NoteBodyHit, NoteEdgeHit, BoundaryHit)):
            return Qt.CursorShape.SplitHCursor
        return Qt.CursorShape.ForbiddenCursor
    if isinstance(hit, BoundaryHit):
        return Qt.CursorShape.SplitHCursor
    if isinstance(hit, NoteEdgeHit):
        return Qt.CursorShape.SizeHorCursor
    if isinstance(hit, NoteBodyHit):
        return Qt.CursorShape.OpenHandCursor
    if mode is EditMode.PEN:
        return Qt.CursorShape.PointingHandCursor
    return Qt.CursorShape.CrossCursor


class GestureController(QObject):
    """
    Turns raw input into gestures and commits.

    Args:
        owner: Receives committed edits
        preview: Receives audio preview hints
        settings: Thresholds, snap and shortcuts
        store: Snapshot store shared with the renderer
        capture_factory: Builds the PointerCapture for a gesture
    """

    gesture_started = pyqtSignal(str)
    gesture_finished = pyqtSignal(str, object)
    gesture_abandoned = pyqtSignal(str, str)
    status_message = pyqtSignal(str, bool)  # message, is_error
    cursor_changed = pyqtSignal(object)

    def __init__(
        self,
        owner: Optional[GridOwnerInterface] = None,
        preview: Optional[PreviewInterface] = None,
        settings: Optional[EditorSettings] = None,
        store: Optional[SnapshotStore] = None,
        capture_factory: Optional[CaptureFactory] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._owner = owner
        self._store = store if store is not None else SnapshotStore()
        self._preview = PreviewBridge(preview)
        self._capture_factory: CaptureFactory = capture_factory or PointerCapture
        self._capture: Optional[PointerCapture] = None

        self._settings = settings if settings is not None else EditorSettings()
        self._hit_tester = HitTester()
        self._commits = CommitProtocol()
        self.apply_settings(self._settings)

        # Active touch points: pointer id -> (x, y)
        self._touches: Dict[int, Tuple[float, float]] = {}
        self._cursor: Optional[Qt.CursorShape] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def snapshot(self) -> EditorSnapshot:
        return self._store.current

    @property
    def state(self) -> InteractionState:
        return self._store.current.interaction

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, GestureState)

    @property
    def capture(self) -> Optional[PointerCapture]:
        return self._capture

    @property
    def owner(self) -> Optional[GridOwnerInterface]:
        return self._owner

    @owner.setter
    def owner(self, value: Optional[GridOwnerInterface]):
        self._owner = value

    @property
    def preview(self) -> PreviewBridge:
        return self._preview

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    def context(self) -> GestureContext:
        snap = self._store.current
        return GestureContext(
            grid=snap.grid,
            geometry=snap.geometry,
            selection=snap.selection,
            snap=snap.snap,
            mode=snap.mode,
            default_octave_shift=self._settings.default_octave_shift,
            drag_threshold_px=self._settings.drag_threshold_px,
            hit_tester=self._hit_tester,
        )

    # =========================================================================
    # Owner-side updates
    # =========================================================================

    def apply_settings(self, settings: EditorSettings) -> None:
        self._settings = settings
        self._hit_tester.edge_threshold_px = settings.edge_threshold_px
        self._hit_tester.handle_radius_px = settings.handle_radius_px
        self._commits.quick_click_ms = settings.quick_click_ms
        self.set_snap(settings.snap)
        geo = self._store.current.geometry
        if geo.view_width > 0:
            self.resize(geo.view_width, geo.view_height)

    def set_grid(self, grid: Grid) -> None:
        """New grid from the owner. Abandons a gesture whose note vanished."""
        grid = to_grid(grid)
        snap = self._store.current
        changes = {'grid': grid}
        if len(grid) != snap.geometry.row_count:
            changes['geometry'] = self._refit(snap.geometry.view_width, snap.geometry.view_height, len(grid))
        self._store.publish(**changes)
        if self.is_active and not still_valid(self.state, grid):
            self._abandon("edited note vanished")

    def set_selection(self, cells: Iterable[CellRef]) -> None:
        self._store.publish(selection=tuple(cells))

    def set_row_configs(self, configs: Iterable[RowConfig]) -> None:
        self._store.publish(row_configs=tuple(configs))

    def set_snap(self, snap: int) -> None:
        self._store.publish(snap=validate_snap(snap))

    def set_playback(self, step: float, is_playing: bool) -> None:
        self._store.publish(playback_step=step, is_playing=is_playing)

    def resize(self, width: float, height: float) -> None:
        """Surface resized: refit cells and abandon any active gesture."""
        if self.is_active:
            self._abandon("surface resized")
        self._store.publish(geometry=self._refit(width, height, len(self._store.current.grid)))

    def _refit(self, width: float, height: float, rows: int) -> GridGeometry:
        return self._store.current.geometry.resized(
            width, height, rows,
            label_width=self._settings.label_width,
            min_row_height=self._settings.min_row_height,
            min_step_width=self._settings.min_step_width,
        )

    # =========================================================================
    # Pointer input
    # =========================================================================

    def pointer_down(self, event: PointerEvent) -> None:
        if event.kind is PointerKind.TOUCH:
            self._touches[event.pointer_id] = (event.x, event.y)
            if len(self._touches) == 2 and self._try_pinch(event):
                return

        if self.is_active:
            # Extra pointers never disturb a running gesture
            return

        state = press(event, self.context())
        if state is None:
            return
        self._begin(state)

    def pointer_move(self, event: PointerEvent) -> None:
        if event.kind is PointerKind.TOUCH and event.pointer_id in self._touches:
            self._touches[event.pointer_id] = (event.x, event.y)

        state = self.state
        if isinstance(state, Idle):
            hovered = move(state, event, self.context())
            self._store.publish(interaction=hovered)
            self._set_cursor(cursor_for(hovered.hovered, self.snapshot.mode))
            return

        if isinstance(state, Stretching) and state.via_pinch:
            if len(self._touches) >= 2:
                a, b = list(self._touches.values())[:2]
                self._update(pinch(state, pointer_distance(a, b), self.context()))
            return

        if event.pointer_id != state.pointer_id:
            return

        ctx = self.context()
        if not still_valid(state, ctx.grid):
            self._abandon("edited note vanished")
            return
        try:
            new_state = move(state, event, ctx)
        except Exception:
            self._reset()
            raise
        self._update(new_state)

    def pointer_left(self) -> None:
        """Pointer left the surface: drop hover feedback (active gestures keep going)."""
        if isinstance(self.state, Idle) and self.state.hovered is not None:
            self._store.publish(interaction=Idle())

    def pointer_up(self, event: PointerEvent) -> None:
        self._touches.pop(event.pointer_id, None)
        state = self.state
        if not isinstance(state, GestureState):
            return
        pinching = isinstance(state, Stretching) and state.via_pinch
        if not pinching and event.pointer_id != state.pointer_id:
            return
        self._finish(event)

    def _try_pinch(self, event: PointerEvent) -> bool:
        """Second finger down: turn an unmoved touch gesture into a stretch."""
        state = self.state
        if isinstance(state, GestureState):
            if state.pointer_kind is not PointerKind.TOUCH or state.moved:
                return False
        a, b = list(self._touches.values())[:2]
        stretch = start_pinch(event, pointer_distance(a, b), self.context())
        if stretch is None:
            return False
        if isinstance(state, GestureState):
            # The one-finger gesture becomes the pinch; nothing is committed for it
            Log.debug(f"GestureController: {state.name} promoted to pinch stretch")
            self._store.publish(interaction=stretch)
            self._preview.stop()
        else:
            self._begin(stretch)
        return True

    # =========================================================================
    # Wheel / keyboard
    # =========================================================================

    def wheel(self, angle_delta_y: float, angle_delta_x: float = 0.0,
              modifiers: Modifiers = Modifiers()) -> bool:
        """
        Wheel input. Transposes the active gesture, scrolls when idle.

        Returns:
            True if the wheel was consumed
        """
        notches = int(angle_delta_y / self._settings.wheel_notch)
        if self.is_active:
            new_state = wheel(self.state, notches)
            if new_state is None:
                return False
            self._update(new_state)
            return True

        geo = self.snapshot.geometry
        if modifiers.shift or (angle_delta_x and not angle_delta_y):
            delta = angle_delta_x or angle_delta_y
            scrolled = geo.with_scroll(
                geo.scroll_x - delta / self._settings.wheel_notch * geo.step_width, geo.scroll_y)
        else:
            scrolled = geo.with_scroll(
                geo.scroll_x, geo.scroll_y - angle_delta_y / self._settings.wheel_notch * geo.row_height)
        if scrolled == geo:
            return False
        self._store.publish(geometry=scrolled)
        return True

    def key_press(self, key: str, modifiers: Modifiers = Modifiers(), auto_repeat: bool = False) -> bool:
        """
        Key down, by Qt key name ("Key_R").

        Returns:
            True if the key was handled
        """
        if key == self._settings.shortcut_razor_mode:
            if not auto_repeat:
                self._set_mode(EditMode.RAZOR)
            return True
        if key == self._settings.shortcut_pen_mode:
            if not auto_repeat:
                self._set_mode(EditMode.PEN)
            return True
        if key == "Key_Escape":
            if self.is_active:
                self.cancel("escape")
            elif self.snapshot.selection and self._owner is not None:
                self._owner.select_notes([])
            return True
        if key == "Key_A" and modifiers.select:
            if self._owner is not None:
                cells = all_cells(self.snapshot.grid)
                self._owner.select_notes(cells)
                self.status_message.emit(f"Selected {len(cells)} notes", False)
            return True
        return False

    def key_release(self, key: str, auto_repeat: bool = False) -> bool:
        if auto_repeat:
            return False
        mode = self.snapshot.mode
        if (key == self._settings.shortcut_razor_mode and mode is EditMode.RAZOR) or \
                (key == self._settings.shortcut_pen_mode and mode is EditMode.PEN):
            self._set_mode(EditMode.NORMAL)
            return True
        return False

    def _set_mode(self, mode: EditMode) -> None:
        if mode is self.snapshot.mode:
            return
        self._store.publish(mode=mode)
        Log.debug(f"GestureController: mode {mode.name}")
        hovered = self.state.hovered if isinstance(self.state, Idle) else None
        self._set_cursor(cursor_for(hovered, mode))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def cancel(self, reason: str = "cancelled") -> None:
        """Abandon the active gesture without committing. Forgets every tracked touch."""
        self._touches.clear()
        if self.is_active:
            self._abandon(reason)

    def _begin(self, state: GestureState) -> None:
        self._store.publish(interaction=state)
        self._capture = self._capture_factory(self.cancel)
        self._capture.acquire()
        self._preview.update(state, len(self.snapshot.grid))
        if isinstance(state, (Moving, MovingGroup)):
            self._set_cursor(Qt.CursorShape.ClosedHandCursor)
        geo = self.snapshot.geometry
        Log.debug(f"GestureController: begin {state.name} at "
                  f"{geo.row_at(state.start_y)}:{geo.column_at(state.start_x)}")
        self.gesture_started.emit(state.name)

    def _update(self, state: InteractionState) -> None:
        self._store.publish(interaction=state)
        self._preview.update(state, len(self.snapshot.grid))

    def _finish(self, event: PointerEvent) -> None:
        state = self.state
        commit = None
        try:
            commit = self._commits.resolve(state, event, self.context())
        finally:
            self._reset()

        if commit is not None:
            if self._owner is None:
                Log.warning(f"GestureController: no owner for {commit.kind} commit")
            else:
                dispatch(commit, self._owner)
                Log.info(f"GestureController: {state.name} -> {commit.kind}")
                self.status_message.emit(commit.describe(), False)
        else:
            Log.debug(f"GestureController: {state.name} ended without commit")
        self.gesture_finished.emit(state.name, commit)

    def _abandon(self, reason: str) -> None:
        state = self.state
        # Cancelled touches never deliver a release
        self._touches.clear()
        self._reset()
        Log.warning(f"GestureController: {state.name} abandoned ({reason})")
        self.gesture_abandoned.emit(state.name, reason)

    def _reset(self) -> None:
        """Back to Idle. Releases capture and stops previews on every path."""
        self._store.publish(interaction=Idle())
        capture, self._capture = self._capture, None
        try:
            self._preview.stop()
        finally:
            if capture is not None:
                capture.release()

    def _set_cursor(self, cursor: Qt.CursorShape) -> None:
        if cursor != self._cursor:
            self._cursor = cursor
            self.cursor_changed.emit(cursor)
