"""Logging setup for anon-diary.

All loggers live under the ``anondiary`` namespace so a single call to
``setup_logging`` controls the whole service.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER = "anondiary"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Configure the ``anondiary`` logger hierarchy. Idempotent."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger, namespaced under ``anondiary``."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


_entry_logger = get_logger("entries")


def log_entry_event(
    device_id: str,
    action: str,
    entry_id: Optional[int],
    success: bool,
    detail: Optional[str] = None,
) -> None:
    """Log one line per pipeline outcome in a grep-friendly format."""
    status = "OK" if success else "FAIL"
    message = f"{action.upper()} | {device_id} | entry={entry_id} | {status}"
    if detail:
        message = f"{message} | {detail}"
    if success:
        _entry_logger.info(message)
    else:
        _entry_logger.warning(message)
