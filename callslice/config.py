"""Configuration loading for callslice (.callslice.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".callslice.yml"


@dataclass
class CallSliceConfig:
    """Represents the project-level settings defined in .callslice.yml."""

    root: Path
    package: Optional[str] = None
    packages: List[str] = field(default_factory=list)
    source_root: Optional[Path] = None
    depth: Optional[int] = None
    exclude_root: bool = False
    code_only: bool = False
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> CallSliceConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CallSliceConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    depth = _as_int(data.get("depth"))
    if depth is not None and depth < 0:
        raise ConfigError(f"{CONFIG_FILENAME}: depth must not be negative")

    source_root_str = _as_str(data.get("source_root"))

    return CallSliceConfig(
        root=root,
        package=_as_str(data.get("package")),
        packages=_as_str_list(data.get("packages")),
        source_root=root / source_root_str if source_root_str else None,
        depth=depth,
        exclude_root=_as_bool(data.get("exclude_root")) or False,
        code_only=_as_bool(data.get("code_only")) or False,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ConfigError(f"{CONFIG_FILENAME}: expected an integer, got {value!r}") from None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "CallSliceConfig", "ConfigError", "load_config"]
