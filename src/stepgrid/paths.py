"""
Path management for StepGrid

Handles platform-specific user directories following standard conventions:
- macOS: ~/Library/Application Support/StepGrid/
- Linux: ~/.config/stepgrid/ (config) and ~/.local/share/stepgrid/ (data)
- Windows: %APPDATA%/StepGrid/
"""
import os
import sys
from pathlib import Path

from .env import get_settings_path

APP_NAME = "StepGrid"
SETTINGS_FILENAME = "editor_settings.json"


def get_user_data_dir() -> Path:
    """Platform-specific user data directory (created on demand)."""
    system = sys.platform

    if system == "darwin":
        base = Path.home() / "Library" / "Application Support"
    elif system == "win32":
        base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:
        base = Path.home() / ".local" / "share"

    data_dir = base / (APP_NAME if system in ("darwin", "win32") else APP_NAME.lower())
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_user_config_dir() -> Path:
    """
    Platform-specific user config directory.

    Same as the data directory on macOS/Windows, ~/.config/stepgrid on Linux.
    """
    if sys.platform in ("darwin", "win32"):
        return get_user_data_dir()
    config_dir = Path.home() / ".config" / APP_NAME.lower()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_logs_dir() -> Path:
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_settings_file() -> Path:
    """Settings file path: STEPGRID_SETTINGS_PATH if set, else the user config dir."""
    explicit = get_settings_path()
    if explicit is not None:
        return explicit
    return get_user_config_dir() / SETTINGS_FILENAME
