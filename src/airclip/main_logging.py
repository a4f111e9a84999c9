"""Logging configuration for the airclip CLI."""
import logging
import os
import sys
from datetime import datetime

from airclip.server_constants import LOG_FILE_TEMPLATE, LOG_TIMESTAMP_FORMAT

LOG_FORMAT = "%(asctime)s %(filename)s:%(lineno)d: %(message)s"


def log_file_path(log_dir: str, now: datetime | None = None) -> str:
    """Return the per-run log file path.

    Args:
        log_dir: Directory holding the log files.
        now: Startup time. Defaults to the current local time.
    """
    stamp = (now or datetime.now()).strftime(LOG_TIMESTAMP_FORMAT)
    return os.path.join(log_dir, LOG_FILE_TEMPLATE.format(timestamp=stamp))


def configure_logging(log_dir: str, verbose: bool) -> str:
    """Send log records to a timestamped file and to standard output.

    Args:
        log_dir: Directory for the log file.
        verbose: If True, set DEBUG level; otherwise INFO level.

    Returns:
        Path of the log file.

    Raises:
        OSError: If the log file cannot be opened.
    """
    path = log_file_path(log_dir)
    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[file_handler, logging.StreamHandler(sys.stdout)],
        force=True,
    )
    return path
