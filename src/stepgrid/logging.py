"""
StepGrid Logging

Logging wrapper for the grid editor. Routes through Python's ``logging``
with a colorized console formatter, so hosts can attach their own handlers
to the ``stepgrid`` logger.

If you have an existing logging system, you can redirect grid logs:

    from stepgrid.logging import GridLog
    GridLog.set_handler(my_log_function)

Or disable logging entirely:

    GridLog.enabled = False
"""

import logging
import os
import sys
from datetime import datetime
from logging import Logger
from typing import Callable, Optional

from colorama import Fore, Style, init

from .env import file_logging_enabled, get_log_level

init(autoreset=True)

LOGGER_NAME = "stepgrid"


class ColorFormatter(logging.Formatter):
    """A formatter that colorizes log level names using colorama."""

    color_map = {
        logging.DEBUG: Fore.BLUE,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.LIGHTRED_EX,
    }

    def format(self, record):
        color = self.color_map.get(record.levelno, Fore.WHITE)
        # Copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def purge_old_logs(log_folder: str, keep: int = 10) -> None:
    """Remove older log files, keeping the most recent ``keep``."""
    all_logs = sorted(
        f for f in os.listdir(log_folder)
        if f.startswith("stepgrid_") and f.endswith(".log")
    )
    for old_file in all_logs[:-keep]:
        os.remove(os.path.join(log_folder, old_file))


def init_logger(
    name: str = LOGGER_NAME,
    console_logging: bool = True,
    file_logging: bool = False,
    level: int = logging.INFO,
    log_folder: Optional[str] = None,
) -> Logger:
    """
    Initialize and configure the StepGrid logger.

    :param name: The logger's name.
    :param console_logging: Whether to log to stdout.
    :param file_logging: Whether to log to a timestamped file.
    :param level: Logging level.
    :param log_folder: Folder for log files. If None, uses the user data dir.
    :return: A configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Avoid duplicate handlers when called more than once
    if not logger.handlers:
        if file_logging:
            if log_folder is None:
                from .paths import get_logs_dir
                log_folder = str(get_logs_dir())
            os.makedirs(log_folder, exist_ok=True)
            purge_old_logs(log_folder, keep=10)
            timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
            file_handler = logging.FileHandler(
                os.path.join(log_folder, f"stepgrid_{timestamp}.log"), encoding="utf-8"
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            logger.addHandler(file_handler)

        if console_logging:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(ColorFormatter(
                fmt="%(asctime)s | %(levelname)s | %(message)s",
                datefmt="%H:%M:%S",
            ))
            logger.addHandler(console_handler)

    return logger


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


class GridLog:
    """
    Class-level logging facade for grid widgets.

    By default, logs through the ``stepgrid`` logger. Can be redirected or disabled.
    """

    # Enable/disable all logging
    enabled: bool = True

    # Custom handler (if set, overrides the logger)
    _handler: Optional[Callable[[int, str], None]] = None
    _logger: Optional[Logger] = None

    @classmethod
    def logger(cls) -> Logger:
        if cls._logger is None:
            cls._logger = init_logger(
                level=_level_from_name(get_log_level()),
                file_logging=file_logging_enabled(),
            )
        return cls._logger

    @classmethod
    def set_logger(cls, logger: Logger) -> None:
        cls._logger = logger

    @classmethod
    def set_handler(cls, handler: Optional[Callable[[int, str], None]]) -> None:
        """
        Set a custom log handler.

        Args:
            handler: Function that takes (level: int, message: str), or None to restore
        """
        cls._handler = handler

    @classmethod
    def set_level(cls, level: str | int) -> None:
        if isinstance(level, str):
            level = _level_from_name(level)
        logger = cls.logger()
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    @classmethod
    def _log(cls, level: int, message: str) -> None:
        if not cls.enabled:
            return
        if cls._handler:
            cls._handler(level, message)
        else:
            cls.logger().log(level, message)

    @classmethod
    def debug(cls, message: str) -> None:
        cls._log(logging.DEBUG, message)

    @classmethod
    def info(cls, message: str) -> None:
        cls._log(logging.INFO, message)

    @classmethod
    def warning(cls, message: str) -> None:
        cls._log(logging.WARNING, message)

    @classmethod
    def error(cls, message: str) -> None:
        cls._log(logging.ERROR, message)


# Convenience alias
Log = GridLog
