"""
Frame Loop

Display-rate repaint scheduler for the grid widget.

Ticks on a QTimer (frame_interval_ms, 16ms = ~60 FPS) and asks the target
to repaint when the snapshot changed since the last painted frame, or every
frame while the transport runs (playhead and pulse animate on their own).
A tick never blocks and never writes the snapshot.
"""

from typing import Callable, Optional

from PyQt6.QtCore import QElapsedTimer, QObject, QTimer, pyqtSignal

from ..constants import FRAME_INTERVAL_MS
from ..logging import GridLog as Log
from .snapshot import SnapshotStore


class FrameLoop(QObject):
    """
    Schedules repaints of one surface.

    Signals:
        frame_requested(float): Seconds since the loop started, once per repaint
    """

    frame_requested = pyqtSignal(float)

    def __init__(self, store: SnapshotStore, repaint: Optional[Callable[[], None]] = None,
                 interval_ms: int = FRAME_INTERVAL_MS, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._store = store
        self._repaint = repaint
        self._painted_version = -1
        self._frames = 0

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

        self._clock = QElapsedTimer()
        self._clock.start()

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    @property
    def frames(self) -> int:
        """Repaints requested so far."""
        return self._frames

    def set_interval(self, interval_ms: int) -> None:
        self._timer.setInterval(max(1, int(interval_ms)))

    def start(self) -> None:
        if not self._timer.isActive():
            self._timer.start()
            Log.debug(f"FrameLoop: started at {self._timer.interval()}ms")

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            Log.debug("FrameLoop: stopped")

    def now(self) -> float:
        return self._clock.elapsed() / 1000.0

    def invalidate(self) -> None:
        """Force a repaint on the next tick."""
        self._painted_version = -1

    def tick(self) -> bool:
        """
        One frame. Returns True if a repaint was requested.
        """
        snapshot = self._store.current
        version = self._store.version
        if version == self._painted_version and not snapshot.is_playing:
            return False
        self._painted_version = version
        self._frames += 1
        if self._repaint is not None:
            self._repaint()
        self.frame_requested.emit(self.now())
        return True
