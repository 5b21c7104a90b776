"""Logging configuration for the API server.

Provides dual output (stdout + file) with configurable level via LOG_LEVEL.
Default: INFO. Set LOG_LEVEL=WARNING for production, DEBUG for verbose output.
"""

import logging
import sys
from pathlib import Path

from budgetdesk.config import settings

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_str: str | None = None) -> int:
    """Resolve a logging level name.

    Args:
        level_str: Level name; defaults to the LOG_LEVEL setting

    Returns:
        Logging level constant (default: INFO)
    """
    level_str = (level_str or settings.log_level).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_server_logging(log_file: str | None = None, level: str | None = None) -> None:
    """
    Configure root logger for the API server.

    Args:
        log_file: Path to log file (default: LOG_FILE setting)
        level: Level name (default: LOG_LEVEL setting)

    Behavior:
        - Sends all loggers to both stdout and the log file
        - ISO format timestamps
        - Replaces handlers installed by earlier calls
    """
    log_path = Path(log_file or settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = get_log_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
