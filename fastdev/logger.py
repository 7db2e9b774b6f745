"""Logging setup: Rich console output plus a dated log file per day.

The file handler is best-effort: if the log directory cannot be created the
logger simply runs console-only.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from rich.logging import RichHandler

from .config import LOG_DIR_NAME, get_config_dir
from .utils import console

LOGGER_NAME = "fastdev"

_FILE_FORMAT = "[%(asctime)s] [%(levelname)-5s] %(message)s"


def get_log_dir() -> Path:
    return get_config_dir() / LOG_DIR_NAME


def get_log_file_path() -> Path:
    """Today's log file, e.g. ``~/.config/fast-dev/logs/2026-01-15.log``."""
    return get_log_dir() / f"{date.today().isoformat()}.log"


def create_logger(debug: bool = False, file_logging: bool = True) -> logging.Logger:
    """Configure and return the ``fastdev`` logger.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        debug: Show DEBUG records on the console (default INFO).
        file_logging: Also append every record to :func:`get_log_file_path`.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.addHandler(console_handler)

    if file_logging:
        try:
            log_file = get_log_file_path()
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError:
            file_handler = None
        if file_handler is not None:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            logger.addHandler(file_handler)

    return logger
