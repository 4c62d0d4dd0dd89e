"""Loading of a project's packages into parsed compilation units."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import PackageLoadError
from ..logging import get_logger
from ..models import CompilationUnit, Package
from .parser import SourceParser, collect_declarations
from .scanner import PathFilter, iter_source_files

_INIT_FILENAME = "__init__.py"


@dataclass
class Project:
    """All packages found under a source root, with units addressable by module path."""

    source_root: Path
    packages: List[Package] = field(default_factory=list)
    units: Dict[str, CompilationUnit] = field(default_factory=dict)

    def package(self, path: str) -> Optional[Package]:
        for package in self.packages:
            if package.path == path:
                return package
        return None

    def has_module(self, module: str) -> bool:
        """Return True for loaded modules and for namespace packages above them."""
        if module in self.units:
            return True
        prefix = f"{module}."
        return any(name.startswith(prefix) for name in self.units)


def resolve_source_root(root: Path, primary: str, configured: Optional[Path] = None) -> Path:
    """Pick the directory that import paths are relative to."""
    if configured is not None:
        return configured
    top_level = primary.split(".", 1)[0]
    src = root / "src"
    if (src / top_level).is_dir() or (src / f"{top_level}.py").is_file():
        return src
    return root


class PackageLoader:
    """Parses every Python file below a source root and groups them into packages."""

    def __init__(self, parser: SourceParser | None = None) -> None:
        self._parser = parser or SourceParser()
        self.logger = get_logger("loader")

    def load(self, source_root: Path, path_filter: PathFilter | None = None) -> Project:
        source_root = source_root.resolve()
        if not source_root.is_dir():
            raise PackageLoadError(f"Source root is not a directory: {source_root}")

        project = Project(source_root=source_root)
        by_path: Dict[str, Package] = {}
        for path in iter_source_files(source_root, path_filter):
            module = _module_path(path, source_root)
            if module is None:
                self.logger.debug("Skipping %s: not an importable module path", path)
                continue
            unit = self._load_unit(path, module)
            # A top-level module forms a package of its own.
            package_path = unit.package_path or unit.module
            package = by_path.get(package_path)
            if package is None:
                package = Package(path=package_path, directory=path.parent)
                by_path[package_path] = package
            package.units.append(unit)
            project.units[module] = unit

        if not by_path:
            raise PackageLoadError(f"No Python packages found under {source_root}")

        project.packages = [by_path[key] for key in sorted(by_path)]
        self.logger.info(
            "Loaded %d packages (%d modules) from %s",
            len(project.packages),
            len(project.units),
            source_root,
        )
        return project

    def _load_unit(self, path: Path, module: str) -> CompilationUnit:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise PackageLoadError(f"Failed to read {path}: {exc}") from exc

        tree = self._parser.parse(source)
        if tree.root_node.has_error:
            self.logger.warning("Syntax errors in %s; continuing with a partial tree", path)

        unit = CompilationUnit(
            module=module,
            path=path,
            source=source,
            tree=tree,
            is_package_init=path.name == _INIT_FILENAME,
        )
        unit.declarations = collect_declarations(tree, source, module)
        return unit


def _module_path(path: Path, source_root: Path) -> Optional[str]:
    parts = list(path.relative_to(source_root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    if not parts or not all(part.isidentifier() for part in parts):
        return None
    return ".".join(parts)


__all__ = ["PackageLoader", "Project", "resolve_source_root"]
