"""
Settings for the grid editor.
"""
from .base import BaseSettings, BaseSettingsManager, FieldValidator, ValidationResult, validated_field
from .editor import EditorSettings, EditorSettingsManager

__all__ = [
    'BaseSettings',
    'BaseSettingsManager',
    'FieldValidator',
    'ValidationResult',
    'validated_field',
    'EditorSettings',
    'EditorSettingsManager',
]
