"""
Playback Clock

Demo transport that sweeps the playhead across the pattern.

The editor does not own transport; this clock only produces a fractional
step position for the snapshot. Updates at ~60 FPS and interpolates between
steps from a QElapsedTimer.
"""

from typing import Optional

from PyQt6.QtCore import QElapsedTimer, QObject, QTimer, pyqtSignal

from ..constants import BEAT_STEPS, FRAME_INTERVAL_MS, STEPS_PER_PATTERN
from ..logging import GridLog as Log

MIN_BPM = 20.0
MAX_BPM = 300.0


class PlaybackClock(QObject):
    """
    Looping step clock.

    Signals:
        position_changed(float): Playhead in steps, 0 <= step < steps
        step_changed(int): Whole step entered
        playback_started(): Clock started
        playback_stopped(): Clock stopped
    """

    position_changed = pyqtSignal(float)
    step_changed = pyqtSignal(int)
    playback_started = pyqtSignal()
    playback_stopped = pyqtSignal()

    def __init__(self, bpm: float = 120.0, steps: int = STEPS_PER_PATTERN,
                 interval_ms: int = FRAME_INTERVAL_MS, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._bpm = self._clamp_bpm(bpm)
        self._steps = steps
        self._is_playing = False
        self._position = 0.0
        self._start_position = 0.0
        self._last_step = -1

        self._update_timer = QTimer(self)
        self._update_timer.setInterval(interval_ms)
        self._update_timer.timeout.connect(self._on_update_tick)

        self._elapsed_timer = QElapsedTimer()

    @staticmethod
    def _clamp_bpm(bpm: float) -> float:
        return max(MIN_BPM, min(MAX_BPM, float(bpm)))

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def position(self) -> float:
        return self._position

    @property
    def bpm(self) -> float:
        return self._bpm

    @bpm.setter
    def bpm(self, value: float):
        if self._is_playing:
            # Re-anchor so the playhead does not jump
            self._start_position = self._position
            self._elapsed_timer.restart()
        self._bpm = self._clamp_bpm(value)

    @property
    def step_ms(self) -> float:
        """Length of one step (a sixteenth at BEAT_STEPS steps per beat)."""
        return 60000.0 / self._bpm / BEAT_STEPS

    def play(self) -> None:
        if self._is_playing:
            return
        self._is_playing = True
        self._start_position = self._position
        self._elapsed_timer.start()
        self._update_timer.start()
        self.playback_started.emit()
        Log.info(f"PlaybackClock: play at {self._bpm:.0f} BPM from step {self._position:.2f}")

    def stop(self) -> None:
        """Stop and return to step 0."""
        was_playing = self._is_playing
        self._is_playing = False
        self._update_timer.stop()
        self._position = 0.0
        self._last_step = -1
        self.position_changed.emit(self._position)
        if was_playing:
            self.playback_stopped.emit()
            Log.info("PlaybackClock: stop")

    def toggle_playback(self) -> None:
        if self._is_playing:
            self.stop()
        else:
            self.play()

    def advance(self, elapsed_ms: float) -> float:
        """Position after elapsed_ms from the anchor, wrapped to the pattern."""
        return (self._start_position + elapsed_ms / self.step_ms) % self._steps

    def _on_update_tick(self) -> None:
        if not self._is_playing:
            return
        self._position = self.advance(self._elapsed_timer.elapsed())
        self.position_changed.emit(self._position)
        step = int(self._position)
        if step != self._last_step:
            self._last_step = step
            self.step_changed.emit(step)
