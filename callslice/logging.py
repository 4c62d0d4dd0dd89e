"""Logging setup for callslice: diagnostics on stderr, the document on stdout."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_ROOT = "callslice"
# -v reports the run summary, -vv every visited function and resolved call.
_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger below the `callslice` logger; library code never adds handlers."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def level_for(verbosity: int) -> int:
    return _LEVELS[max(0, min(verbosity, len(_LEVELS) - 1))]


def configure_logging(*, verbosity: int = 0, log_file: Path | None = None) -> logging.Logger:
    """Attach a stderr handler at the level `verbosity` selects and, when given,
    a file handler that always records DEBUG. Safe to call once per CLI run."""
    logger = logging.getLogger(_ROOT)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_level = level_for(verbosity)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(f"[{_ROOT}] %(levelname)s %(message)s"))
    logger.addHandler(console)

    logger.setLevel(console_level)
    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)
        logger.setLevel(logging.DEBUG)
    return logger


__all__ = ["configure_logging", "get_logger", "level_for"]
