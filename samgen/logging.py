"""Logging helpers for samgen.

Every component logs through ``samgen.<component>``. The CLI configures the
``samgen`` logger twice: once with defaults so config errors are visible, and
again after ``samgen.json`` has supplied ``verbose`` and ``log_file``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "samgen"
_CONSOLE_FORMAT = "[samgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """``get_logger("resolver")`` is the ``samgen.resolver`` logger."""
    if not component:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{component}")


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route samgen records to stderr and, when given, to ``log_file``."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # A second call replaces the first call's handlers and releases its log file.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
