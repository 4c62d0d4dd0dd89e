"""Error hierarchy for callslice runs.

Every error is fatal to the run that raised it: nothing is retried and no
partial document is produced.
"""

from __future__ import annotations

from pathlib import Path


class CallSliceError(RuntimeError):
    """Base error for callslice failures."""


class ConfigError(CallSliceError):
    """Raised when .callslice.yml cannot be parsed."""


class ManifestUnreadableError(CallSliceError):
    """The project manifest (pyproject.toml) is missing, unreadable or unusable.

    Attributes:
        path: Location of the manifest that was read.
        reason: Human-readable error description.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read manifest {path}: {reason}")


class PackageLoadError(CallSliceError):
    """Loading the project's packages failed or found nothing to load."""


class EntryPointNotFoundError(CallSliceError):
    """The primary package declares no function with the requested name.

    Attributes:
        function: Requested entry point name.
        package: Import path of the primary package that was searched.
    """

    def __init__(self, function: str, package: str) -> None:
        self.function = function
        self.package = package
        super().__init__(f"Function {function} not found in package {package}")


class SourceReadError(CallSliceError):
    """The file backing an indexed declaration could not be re-read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read source {path}: {reason}")


class WorkingDirectoryError(CallSliceError):
    """Changing into, or restoring, the working directory failed."""


__all__ = [
    "CallSliceError",
    "ConfigError",
    "EntryPointNotFoundError",
    "ManifestUnreadableError",
    "PackageLoadError",
    "SourceReadError",
    "WorkingDirectoryError",
]
