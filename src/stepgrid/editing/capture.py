"""
Pointer Capture

Scoped, application-wide subscription held for the lifetime of one gesture.

The widget already receives moves/releases while a button is held; what it
misses is the pointer leaving tracking altogether (window deactivated, touch
sequence cancelled, popup stealing the grab). While captured, an event
filter on the application reports those as "lost" so the gesture can be
abandoned without a commit.

Release is idempotent and guaranteed by the context manager:

    with PointerCapture(controller.cancel):
        ...
"""

from typing import Callable, Optional

from PyQt6.QtCore import QCoreApplication, QEvent, QObject

from ..logging import GridLog as Log

LOST_EVENTS = {
    QEvent.Type.ApplicationDeactivate: "application deactivated",
    QEvent.Type.WindowDeactivate: "window deactivated",
    QEvent.Type.TouchCancel: "touch cancelled",
    QEvent.Type.UngrabMouse: "mouse grab lost",
}


class _CaptureFilter(QObject):
    def __init__(self, on_lost: Callable[[str], None], parent: Optional[QObject] = None):
        super().__init__(parent)
        self._on_lost = on_lost

    def eventFilter(self, obj, event) -> bool:
        reason = LOST_EVENTS.get(event.type())
        if reason is not None:
            self._on_lost(reason)
        return False


class PointerCapture:
    """
    Install/remove the application event filter for one gesture.

    Args:
        on_lost: Called with a reason when tracking is lost
        source: Object to filter (defaults to the running application)
    """

    def __init__(self, on_lost: Callable[[str], None], source: Optional[QObject] = None):
        self._on_lost = on_lost
        self._source = source
        self._filter: Optional[_CaptureFilter] = None

    @property
    def active(self) -> bool:
        return self._filter is not None

    def acquire(self) -> "PointerCapture":
        if self._filter is not None:
            return self
        source = self._source if self._source is not None else QCoreApplication.instance()
        if source is None:
            Log.warning("PointerCapture: no application instance, capture skipped")
            return self
        self._source = source
        self._filter = _CaptureFilter(self._lost)
        source.installEventFilter(self._filter)
        Log.debug("PointerCapture: installed")
        return self

    def release(self) -> None:
        if self._filter is None:
            return
        self._source.removeEventFilter(self._filter)
        self._filter.deleteLater()
        self._filter = None
        Log.debug("PointerCapture: released")

    def _lost(self, reason: str) -> None:
        if self._filter is not None:
            self._on_lost(reason)

    def __enter__(self) -> "PointerCapture":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
