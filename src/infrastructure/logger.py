"""
Logger Module

Provides a centralized logging system that outputs to both console and file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Application log file path (relative to project root)
_LOG_FILE_NAME = "app.log"

# Overrides the default log file location when set
_LOG_FILE_ENV = "ATTENDANCE_LOG_FILE"


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def get_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with console and file handlers.

    Args:
        name: Logger name (typically component name like "AttendanceAggregator")
        log_file: Optional custom log file path. If None, uses
            $ATTENDANCE_LOG_FILE or the default app.log

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    # Formatter for both handlers
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler - DEBUG level and above
    log_file = log_file or os.environ.get(_LOG_FILE_ENV)
    log_path = Path(log_file) if log_file else _get_project_root() / _LOG_FILE_NAME
    try:
        file_handler = logging.FileHandler(
            log_path,
            mode="a",
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # If file logging fails, just log to console
        logger.warning(f"Could not open log file {log_path}: {e}")

    return logger
