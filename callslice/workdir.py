"""Scoped working-directory changes."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import WorkingDirectoryError
from .logging import get_logger

_logger = get_logger("workdir")


@contextmanager
def working_directory(path: Path | str) -> Iterator[Path]:
    """Change into `path` for the duration of the block and always change back."""
    try:
        previous = Path.cwd()
    except OSError as exc:
        raise WorkingDirectoryError(f"Cannot determine current directory: {exc}") from exc

    target = Path(path).expanduser()
    try:
        os.chdir(target)
    except OSError as exc:
        raise WorkingDirectoryError(f"Cannot change directory to {target}: {exc}") from exc
    _logger.debug("Changed working directory to %s", target)

    try:
        yield Path.cwd()
    finally:
        try:
            os.chdir(previous)
        except OSError as exc:
            raise WorkingDirectoryError(
                f"Cannot restore working directory {previous}: {exc}"
            ) from exc


__all__ = ["working_directory"]
