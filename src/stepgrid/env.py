"""
Environment configuration for StepGrid.

Values can be overridden through the process environment or a ``.env`` file
next to the working directory:

    STEPGRID_LOG_LEVEL=INFO
    STEPGRID_LOG_FILE=1
    STEPGRID_SETTINGS_PATH=/path/to/editor_settings.json
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_loaded = False


def load_environment(dotenv_path: Optional[str] = None) -> None:
    """Load ``.env`` once. Existing environment variables take precedence."""
    global _loaded
    if _loaded and dotenv_path is None:
        return
    load_dotenv(dotenv_path=dotenv_path, override=False)
    _loaded = True


def get_log_level(default: str = "INFO") -> str:
    load_environment()
    return os.getenv("STEPGRID_LOG_LEVEL", default).upper()


def file_logging_enabled() -> bool:
    load_environment()
    return os.getenv("STEPGRID_LOG_FILE", "0").strip().lower() in ("1", "true", "yes", "on")


def get_settings_path() -> Optional[Path]:
    """Explicit settings file from the environment, or None for the default location."""
    load_environment()
    value = os.getenv("STEPGRID_SETTINGS_PATH")
    if not value:
        return None
    return Path(value).expanduser()
