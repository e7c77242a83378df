"""Logging setup for the sedit application.

The editor owns the whole screen, so nothing may be logged to the console
while it runs. By default the ``sedit`` logger only gets a NullHandler.
Setting the ``SEDIT_LOG`` environment variable turns on a rotating log file
in the per-user log directory:

- ``SEDIT_LOG=1`` (or ``true``/``yes``) logs at DEBUG level,
- ``SEDIT_LOG=<level name>`` (e.g. ``INFO``) logs at that level.
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import platformdirs

LOG_ENV_VAR = "SEDIT_LOG"
LOG_FILENAME = "sedit.log"

logger = logging.getLogger("sedit")


def _level_from_env(value: str) -> Optional[int]:
    value = value.strip()
    if not value or value.lower() in {"0", "false", "no"}:
        return None
    if value.lower() in {"1", "true", "yes"}:
        return logging.DEBUG
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.DEBUG


def setup_logging(environ: Optional[Mapping[str, str]] = None,
                  log_dir: Optional[str | os.PathLike] = None) -> Optional[Path]:
    """Configure handlers on the ``sedit`` logger.

    Safe to call more than once; previous handlers are removed first.

    Args:
        environ: Environment to read ``SEDIT_LOG`` from (default os.environ).
        log_dir: Directory for the log file (default: platform log dir).

    Returns:
        Path of the log file, or None when file logging is off.
    """
    if environ is None:
        environ = os.environ

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(logging.NullHandler())

    level = _level_from_env(environ.get(LOG_ENV_VAR, ""))
    if level is None:
        return None

    directory = Path(log_dir) if log_dir is not None else Path(platformdirs.user_log_dir("sedit"))
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e_mkdir:
        print(f"Error creating log directory '{directory}': {e_mkdir}", file=sys.stderr)
        directory = Path(tempfile.gettempdir())

    log_path = directory / LOG_FILENAME
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=1 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
    except OSError as e_fh:
        print(f"Error setting up file logger for '{log_path}': {e_fh}", file=sys.stderr)
        return None

    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
    ))
    file_handler.setLevel(level)
    logger.addHandler(file_handler)
    logger.setLevel(level)
    return log_path
