"""
Tests for the editor settings schema and its JSON-backed manager.
"""
import json
from dataclasses import dataclass

import pytest

from stepgrid.settings import (
    BaseSettings, EditorSettings, EditorSettingsManager, FieldValidator, ValidationResult,
    validated_field,
)


class TestFieldValidator:
    """Rules attached to settings fields."""

    def test_range(self):
        validator = FieldValidator(min_value=0, max_value=10)
        assert validator.validate(5, "f").valid
        assert "below minimum" in validator.validate(-1, "f").errors[0]
        assert "above maximum" in validator.validate(11, "f").errors[0]

    def test_bool_is_not_a_number(self):
        assert not FieldValidator(min_value=0).validate(True, "f").valid

    def test_choices(self):
        validator = FieldValidator(choices=[1, 2, 4])
        assert validator.validate(4, "snap").valid
        assert not validator.validate(3, "snap").valid

    def test_none_rejected_unless_allowed(self):
        assert not FieldValidator().validate(None, "f").valid
        assert FieldValidator(allow_none=True).validate(None, "f").valid

    def test_custom(self):
        validator = FieldValidator(custom=lambda v, name: None if v % 2 == 0 else f"{name}: odd")
        assert validator.validate(2, "f").valid
        assert validator.validate(3, "f").errors == ["f: odd"]


class TestBaseSettings:
    """Dataclass round trip and validation."""

    @dataclass
    class Sample(BaseSettings):
        count: int = validated_field(3, min_value=1, max_value=5)
        name: str = "x"

    def test_from_dict_defaults_and_unknown_keys(self):
        sample = self.Sample.from_dict({'count': 4, 'unknown': True})
        assert sample.count == 4
        assert sample.name == "x"

    def test_validate_field(self):
        sample = self.Sample(count=9)
        assert not sample.validate_field('count').valid
        assert sample.validate_field('name').valid
        with pytest.raises(AttributeError):
            sample.validate_field('missing')

    def test_result_merge(self):
        result = ValidationResult()
        other = ValidationResult()
        other.add_error("bad")
        result.merge(other)
        assert not result


class TestEditorSettings:
    """Editor defaults and cross-field rules."""

    def test_defaults(self):
        settings = EditorSettings()
        assert settings.snap == 1
        assert settings.edge_threshold_px == 15
        assert settings.quick_click_ms == 250
        assert settings.drag_threshold_px == 3
        assert settings.label_width == 80
        assert settings.wheel_notch == 120
        assert settings.is_valid()

    def test_invalid_snap(self):
        assert not EditorSettings(snap=3).is_valid()

    def test_shortcut_must_be_qt_key(self):
        assert EditorSettings(shortcut_razor_mode="Key_X").is_valid()
        assert not EditorSettings(shortcut_razor_mode="R").is_valid()

    def test_pulse_range_ordered(self):
        assert not EditorSettings(pulse_min_hz=5.0, pulse_max_hz=2.0).is_valid()


class TestEditorSettingsManager:
    """Load/save behaviour."""

    def test_missing_file_uses_defaults(self, qapp, tmp_path):
        manager = EditorSettingsManager(tmp_path / "settings.json")
        assert manager.is_loaded()
        assert manager.snap == 1

    def test_round_trip(self, qapp, tmp_path):
        path = tmp_path / "settings.json"
        manager = EditorSettingsManager(path)
        changed = []
        manager.settings_changed.connect(changed.append)
        manager.snap = 4
        assert changed == ['snap']
        assert manager.has_pending_save()
        manager.force_save()
        assert json.loads(path.read_text())['snap'] == 4
        assert EditorSettingsManager(path).snap == 4

    def test_rejected_value_reverts(self, qapp, tmp_path):
        manager = EditorSettingsManager(tmp_path / "settings.json")
        failures = []
        manager.validation_failed.connect(failures.append)
        manager.snap = 3
        assert manager.snap == 1
        assert len(failures) == 1

    def test_unknown_and_missing_keys(self, qapp, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({'snap': 2, 'not_a_setting': 1}))
        manager = EditorSettingsManager(path)
        assert manager.snap == 2
        assert manager.quick_click_ms == 250

    def test_corrupt_file_falls_back_to_defaults(self, qapp, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert EditorSettingsManager(path).snap == 1

    def test_invalid_values_fall_back_to_defaults(self, qapp, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({'snap': 7}))
        assert EditorSettingsManager(path).snap == 1

    def test_environment_path(self, qapp, tmp_path, monkeypatch):
        path = tmp_path / "env_settings.json"
        monkeypatch.setenv("STEPGRID_SETTINGS_PATH", str(path))
        assert EditorSettingsManager.from_environment().path == path

    def test_reset_to_defaults(self, qapp, tmp_path):
        path = tmp_path / "settings.json"
        manager = EditorSettingsManager(path)
        manager.snap = 4
        manager.default_octave_shift = 2
        reloads = []
        manager.settings_loaded.connect(lambda: reloads.append(True))
        manager.reset_to_defaults()
        assert manager.snap == 1
        assert manager.default_octave_shift == 0
        assert reloads == [True]
        assert not manager.has_pending_save()
        assert json.loads(path.read_text())['snap'] == 1
