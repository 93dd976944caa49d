"""
Base Settings

Dataclass-backed settings with field validation and a JSON-file manager.

Features:
- Dataclass schema with validation metadata (validated_field)
- Backwards-compatible loading (missing keys take defaults, unknown keys ignored)
- Debounced save to a JSON file
- Signal emission for UI reactivity

Usage:
    @dataclass
    class MySettings(BaseSettings):
        volume: int = validated_field(50, min_value=0, max_value=100)

    class MySettingsManager(BaseSettingsManager):
        SETTINGS_CLASS = MySettings
"""
import json
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, Union

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..logging import GridLog as Log


# =============================================================================
# Validation Framework
# =============================================================================

@dataclass
class ValidationResult:
    """
    Result of validating settings.

    Attributes:
        valid: True if all validations passed
        errors: Validation failures
    """
    valid: bool = True
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.valid = False

    def merge(self, other: 'ValidationResult'):
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class FieldValidator:
    """
    Validation rules for a settings field.

    Example:
        snap: int = field(default=1, metadata={
            'validator': FieldValidator(choices=[1, 2, 4])
        })
    """
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    choices: Optional[List[Any]] = None
    # Signature: (value, field_name) -> error message or None
    custom: Optional[Callable[[Any, str], Optional[str]]] = None
    allow_none: bool = False

    def validate(self, value: Any, field_name: str) -> ValidationResult:
        result = ValidationResult()

        if value is None:
            if not self.allow_none:
                result.add_error(f"{field_name}: Cannot be None")
            return result

        # bool is an int subclass; never accept it for numeric ranges
        numeric = isinstance(value, (int, float)) and not isinstance(value, bool)
        if (self.min_value is not None or self.max_value is not None) and not numeric:
            result.add_error(f"{field_name}: Expected a number, got {type(value).__name__}")
            return result

        if self.min_value is not None and value < self.min_value:
            result.add_error(f"{field_name}: Value {value} is below minimum {self.min_value}")
        if self.max_value is not None and value > self.max_value:
            result.add_error(f"{field_name}: Value {value} is above maximum {self.max_value}")

        if self.choices is not None:
            check_value = value.value if isinstance(value, Enum) else value
            valid_choices = [c.value if isinstance(c, Enum) else c for c in self.choices]
            if check_value not in valid_choices:
                result.add_error(f"{field_name}: Value '{value}' not in allowed choices: {self.choices}")

        if self.custom is not None:
            error = self.custom(value, field_name)
            if error:
                result.add_error(error)

        return result


def validated_field(
    default: Any = None,
    *,
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    choices: Optional[List[Any]] = None,
    allow_none: bool = False,
    custom: Optional[Callable[[Any, str], Optional[str]]] = None,
    **kwargs
):
    """
    Create a dataclass field with validation metadata.

    Example:
        @dataclass
        class MySettings(BaseSettings):
            snap: int = validated_field(1, choices=[1, 2, 4])
            frame_interval_ms: int = validated_field(16, min_value=1, max_value=100)
    """
    validator = FieldValidator(
        min_value=min_value,
        max_value=max_value,
        choices=choices,
        allow_none=allow_none,
        custom=custom,
    )
    metadata = kwargs.pop('metadata', {})
    metadata['validator'] = validator
    return field(default=default, metadata=metadata, **kwargs)


@dataclass
class BaseSettings:
    """
    Base class for settings dataclasses.

    Subclasses define every field with a default so older files still load.
    """

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseSettings':
        """Create settings from a dict; missing keys take defaults, unknown keys are dropped."""
        valid_keys = {f.name for f in fields(cls)}
        merged = asdict(cls())
        merged.update({k: v for k, v in data.items() if k in valid_keys})
        return cls(**merged)

    def validate(self) -> ValidationResult:
        """Validate every field that carries a validator."""
        result = ValidationResult()
        for f in fields(self):
            validator = f.metadata.get('validator') if f.metadata else None
            if isinstance(validator, FieldValidator):
                result.merge(validator.validate(getattr(self, f.name), f.name))
        return result

    def validate_field(self, field_name: str) -> ValidationResult:
        """
        Validate a single field by name.

        Raises:
            AttributeError: If field doesn't exist
        """
        for f in fields(self):
            if f.name == field_name:
                validator = f.metadata.get('validator') if f.metadata else None
                if isinstance(validator, FieldValidator):
                    return validator.validate(getattr(self, field_name), field_name)
                return ValidationResult()
        raise AttributeError(f"Field '{field_name}' not found in {self.__class__.__name__}")

    def is_valid(self) -> bool:
        return self.validate().valid


class BaseSettingsManager(QObject):
    """
    JSON-file settings manager.

    Provides:
    - Load on construction (falls back to defaults on a bad file)
    - Debounced save on change
    - settings_changed(name) per changed field

    Subclasses set SETTINGS_CLASS and add typed property accessors.
    """

    settings_changed = pyqtSignal(str)  # Setting name that changed
    settings_loaded = pyqtSignal()
    validation_failed = pyqtSignal(object)  # ValidationResult
    settings_save_failed = pyqtSignal(str)  # Error message

    SETTINGS_CLASS: Type[BaseSettings] = BaseSettings
    SAVE_DEBOUNCE_MS: int = 300

    def __init__(self, path: Optional[Union[str, Path]] = None, parent=None):
        """
        Args:
            path: JSON file to persist to (None keeps settings in memory only)
            parent: Parent QObject
        """
        super().__init__(parent)
        self._path = Path(path) if path is not None else None
        self._settings: BaseSettings = self.SETTINGS_CLASS()
        self._loaded = False
        self._pending_save = False

        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(self.SAVE_DEBOUNCE_MS)
        self._save_timer.timeout.connect(self._do_save)

        self._load_from_storage()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def settings(self) -> BaseSettings:
        return self._settings

    # =========================================================================
    # Access
    # =========================================================================

    def set_validated(self, key: str, value: Any) -> ValidationResult:
        """
        Set a value only if it passes the field's validator.

        Returns:
            ValidationResult - the value was stored only if result.valid
        """
        if not hasattr(self._settings, key):
            result = ValidationResult()
            result.add_error(f"Unknown setting: {key}")
            return result

        old_value = getattr(self._settings, key)
        setattr(self._settings, key, value)
        result = self._settings.validate_field(key)

        if result.valid:
            if old_value != value:
                self._save_setting(key)
        else:
            setattr(self._settings, key, old_value)
            Log.warning(f"{self.__class__.__name__}: rejected {key}={value!r}: {'; '.join(result.errors)}")
            self.validation_failed.emit(result)
        return result

    def reset_to_defaults(self):
        """Replace every value with its default, save, and announce a reload."""
        self._settings = self.SETTINGS_CLASS()
        self._save_timer.stop()
        self._do_save()
        Log.info(f"{self.__class__.__name__}: reset to defaults")
        self.settings_loaded.emit()

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load_from_storage(self):
        if self._path is None or not self._path.exists():
            self._loaded = True
            return

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
            settings = self.SETTINGS_CLASS.from_dict(stored)
            result = settings.validate()
            if not result.valid:
                raise ValueError("; ".join(result.errors))
            self._settings = settings
            Log.info(f"{self.__class__.__name__}: loaded settings from {self._path}")
        except (OSError, ValueError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            Log.error(f"{self.__class__.__name__}: Failed to load settings from {self._path}: {e}")
            self._settings = self.SETTINGS_CLASS()

        self._loaded = True
        self.settings_loaded.emit()

    def _save_setting(self, key: str):
        """Queue a debounced save and announce the change."""
        self._pending_save = True
        self._save_timer.start()
        self.settings_changed.emit(key)

    def _do_save(self):
        if self._path is None:
            self._pending_save = False
            return

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            self._pending_save = False
            Log.debug(f"{self.__class__.__name__}: saved settings to {self._path}")
        except OSError as e:
            Log.error(f"{self.__class__.__name__}: Failed to save settings: {e}")
            self.settings_save_failed.emit(str(e))

    def force_save(self):
        """Save immediately, bypassing the debounce."""
        self._save_timer.stop()
        self._do_save()

    def is_loaded(self) -> bool:
        return self._loaded

    def has_pending_save(self) -> bool:
        return self._pending_save
