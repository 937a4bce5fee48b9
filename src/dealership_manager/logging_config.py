"""Logging configuration for DealershipManager."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from dealership_manager.config import LOG_BACKUP_COUNT, LOG_FILENAME, LOG_MAX_BYTES
from dealership_manager.paths import get_logs_dir

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Path] = None,
) -> Path:
    """Send INFO and above to the rotating app log, and ``console_level`` to stderr.

    Calling it again replaces the handlers installed by the previous call.
    Returns the path of the log file.
    """
    log_path = log_file or get_logs_dir() / LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(console_level)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(min(console_level, logging.INFO))
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    def log_unhandled(
        exc_type: type[BaseException],
        exc: BaseException,
        traceback: object,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, traceback)
            return
        root_logger.critical("Unhandled exception", exc_info=(exc_type, exc, traceback))

    sys.excepthook = log_unhandled
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return a module or class logger."""
    return logging.getLogger(name)
