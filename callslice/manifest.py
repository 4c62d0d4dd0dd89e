"""Project membership resolution from pyproject.toml."""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .errors import ManifestUnreadableError
from .logging import get_logger

MANIFEST_FILENAME = "pyproject.toml"

_logger = get_logger("manifest")


def normalise_package_name(name: str) -> str:
    """Turn a distribution name into the import path it conventionally ships."""
    return re.sub(r"[-.]+", "_", name.strip()).lower()


def load_membership(
    root: Path,
    package: Optional[str] = None,
    extra: Iterable[str] = (),
) -> List[str]:
    """Return the ordered package-path prefixes that belong to the project.

    The first entry is the primary package, where the entry point is looked up.
    """
    manifest = root / MANIFEST_FILENAME
    try:
        text = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestUnreadableError(manifest, str(exc)) from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ManifestUnreadableError(manifest, f"invalid TOML: {exc}") from exc

    primary = package.strip() if package else _project_package(data)
    if not primary:
        raise ManifestUnreadableError(
            manifest, "no [project] name and no package was given"
        )

    prefixes: List[str] = []
    for candidate in (primary, *_setuptools_packages(data), *extra):
        if candidate and candidate not in prefixes:
            prefixes.append(candidate)
    _logger.debug("Project membership: %s", ", ".join(prefixes))
    return prefixes


def is_member(prefixes: Sequence[str], package_path: str) -> bool:
    """Return True when package_path is one of the prefixes or a sub-package of one."""
    for prefix in prefixes:
        if package_path == prefix or package_path.startswith(f"{prefix}."):
            return True
    return False


def _project_package(data: dict) -> Optional[str]:
    project = data.get("project")
    if isinstance(project, dict) and isinstance(project.get("name"), str):
        return normalise_package_name(project["name"])

    tool = data.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    if isinstance(poetry, dict) and isinstance(poetry.get("name"), str):
        return normalise_package_name(poetry["name"])
    return None


def _setuptools_packages(data: dict) -> List[str]:
    tool = data.get("tool")
    setuptools = tool.get("setuptools") if isinstance(tool, dict) else None
    if not isinstance(setuptools, dict):
        return []
    packages = setuptools.get("packages")
    if not isinstance(packages, list):
        return []
    return [item for item in packages if isinstance(item, str)]


__all__ = ["MANIFEST_FILENAME", "is_member", "load_membership", "normalise_package_name"]
