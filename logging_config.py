"""
Logging Configuration for Fredagsliga

Console output plus a rotating log file in the per-user log directory.

Usage:
    from logging_config import setup_logging

    setup_logging(level="DEBUG")
    logger = logging.getLogger(__name__)
    logger.info("Session started")
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from config import PATHS


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILENAME = "fredagsliga.log"


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    enable_console: bool = True,
    enable_file: bool = True,
    max_bytes: int = 1024 * 1024,  # 1MB
    backup_count: int = 3,
) -> None:
    """
    Set up application-wide logging. Call once at startup.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for the log file (default: per-user log dir)
        enable_console: Whether to log to stderr
        enable_file: Whether to log to a rotating file
        max_bytes: Size per log file before rotation
        backup_count: Number of rotated files to keep
    """
    log_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if enable_file:
        log_path = Path(log_dir) if log_dir is not None else PATHS.log_dir
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / LOG_FILENAME,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    root_logger.info(
        "Logging initialized - Level: %s, Console: %s, File: %s",
        level, enable_console, enable_file,
    )
