"""
Editor Settings

User-tunable gesture thresholds, snap, shortcuts and frame timing for the
grid editor, persisted as JSON.

Usage:
    from stepgrid.settings import EditorSettingsManager

    manager = EditorSettingsManager.from_environment()
    manager.snap = 4
    manager.settings_changed.connect(on_setting_changed)
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PyQt6.QtCore import Qt

from ..constants import (
    DRAG_THRESHOLD_PX, EDGE_THRESHOLD_PX, FRAME_INTERVAL_MS, LABEL_WIDTH,
    MAX_OCTAVE_SHIFT, MIN_OCTAVE_SHIFT, MIN_ROW_HEIGHT, MIN_STEP_WIDTH,
    PULSE_MAX_HZ, PULSE_MIN_HZ, QUICK_CLICK_MS, TRANSFORM_HANDLE_RADIUS_PX,
    VALID_SNAPS, WHEEL_NOTCH,
)
from ..paths import get_settings_file
from .base import BaseSettings, BaseSettingsManager, ValidationResult, validated_field


def _qt_key(value, field_name):
    """Shortcut values are Qt.Key member names, e.g. 'Key_R'."""
    if not isinstance(value, str) or value not in Qt.Key.__members__:
        return f"{field_name}: '{value}' is not a Qt key name"
    return None


@dataclass
class EditorSettings(BaseSettings):
    """Settings schema for the grid editor."""

    # Quantization
    snap: int = validated_field(1, choices=list(VALID_SNAPS))

    # Hit testing
    edge_threshold_px: int = validated_field(EDGE_THRESHOLD_PX, min_value=2, max_value=60)
    handle_radius_px: int = validated_field(TRANSFORM_HANDLE_RADIUS_PX, min_value=2, max_value=40)

    # Click vs drag
    quick_click_ms: int = validated_field(QUICK_CLICK_MS, min_value=50, max_value=1000)
    drag_threshold_px: int = validated_field(DRAG_THRESHOLD_PX, min_value=1, max_value=20)

    # Layout
    label_width: int = validated_field(LABEL_WIDTH, min_value=0, max_value=300)
    min_row_height: int = validated_field(MIN_ROW_HEIGHT, min_value=8, max_value=200)
    min_step_width: int = validated_field(MIN_STEP_WIDTH, min_value=8, max_value=200)

    # Render loop
    frame_interval_ms: int = validated_field(FRAME_INTERVAL_MS, min_value=1, max_value=100)
    pulse_min_hz: float = validated_field(PULSE_MIN_HZ, min_value=0.1, max_value=30.0)
    pulse_max_hz: float = validated_field(PULSE_MAX_HZ, min_value=0.1, max_value=30.0)

    # Input
    wheel_notch: int = validated_field(WHEEL_NOTCH, min_value=1, max_value=1200)
    shortcut_razor_mode: str = validated_field("Key_R", custom=_qt_key)
    shortcut_pen_mode: str = validated_field("Key_P", custom=_qt_key)

    # New notes
    default_octave_shift: int = validated_field(0, min_value=MIN_OCTAVE_SHIFT, max_value=MAX_OCTAVE_SHIFT)

    def validate(self) -> ValidationResult:
        result = super().validate()
        if result.valid and self.pulse_min_hz > self.pulse_max_hz:
            result.add_error(
                f"pulse_min_hz: {self.pulse_min_hz} is above pulse_max_hz {self.pulse_max_hz}"
            )
        return result


class EditorSettingsManager(BaseSettingsManager):
    """
    Settings manager for the grid editor.

    Type-safe accessors for the values the widget reads every gesture.
    """

    SETTINGS_CLASS = EditorSettings

    def __init__(self, path: Optional[Union[str, Path]] = None, parent=None):
        super().__init__(path, parent)

    @classmethod
    def from_environment(cls, parent=None) -> 'EditorSettingsManager':
        """Manager bound to STEPGRID_SETTINGS_PATH or the user config dir."""
        return cls(get_settings_file(), parent)

    @property
    def snap(self) -> int:
        return self._settings.snap

    @snap.setter
    def snap(self, value: int):
        self.set_validated('snap', value)

    @property
    def edge_threshold_px(self) -> int:
        return self._settings.edge_threshold_px

    @property
    def handle_radius_px(self) -> int:
        return self._settings.handle_radius_px

    @property
    def quick_click_ms(self) -> int:
        return self._settings.quick_click_ms

    @property
    def drag_threshold_px(self) -> int:
        return self._settings.drag_threshold_px

    @property
    def frame_interval_ms(self) -> int:
        return self._settings.frame_interval_ms

    @property
    def default_octave_shift(self) -> int:
        return self._settings.default_octave_shift

    @default_octave_shift.setter
    def default_octave_shift(self, value: int):
        self.set_validated('default_octave_shift', value)
