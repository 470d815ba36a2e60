"""Centralized logging configuration for the level generator.

All loggers obtained through get_logger() live below the 'levelgen' namespace. Call setup_logging() once at startup
to write DEBUG output to a rotating log file and WARNING output (or lower) to the console. Without setup_logging(),
records propagate to whatever the host application configured.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

import constants

_logging_initialized = False


def setup_logging(
    log_dir: Path | str | None = None,
    log_level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
) -> Path | None:
    """Configures the logging system for the level generator.

    Args:
        log_dir: Directory the log file is written to. If None, only console logging is configured.
        log_level: Level for file logging.
        console_level: Level for console output.

    Returns:
        The path to the log file, or None if no log file is written.
    """
    global _logging_initialized

    root_logger = logging.getLogger(constants.LOGGER_NAMESPACE)
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers (for re-initialization).
    root_logger.handlers.clear()

    log_path = None
    if log_dir is not None:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        log_path = log_dir_path / constants.LOG_FILE_NAME

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=constants.MAX_LOG_SIZE,
            backupCount=constants.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-35s | %(funcName)-25s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(name)-25s | %(message)s"))
    root_logger.addHandler(console_handler)

    if not _logging_initialized:
        root_logger.debug(f"Logging initialized (log file: {log_path})")
        _logging_initialized = True

    return log_path


def get_logger(name: str) -> logging.Logger:
    """Returns a logger that is a child of the level generator's root logger.

    Args:
        name: Module name (typically __name__).
    """
    if name.startswith(constants.LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{constants.LOGGER_NAMESPACE}.{name}")
