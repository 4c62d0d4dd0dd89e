"""Extraction pipeline: from a project root and a function name to a document."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import CallSliceConfig, ConfigError, load_config
from .errors import PackageLoadError
from .extraction import (
    CallGraphWalker,
    SourceSlicer,
    build_index,
    default_depth,
    render_document,
)
from .logging import get_logger
from .manifest import load_membership
from .models import SymbolId
from .semantic import (
    PackageLoader,
    SemanticModel,
    load_path_filter,
    resolve_source_root,
)


@dataclass
class ExtractionResult:
    """Outcome of one extraction run."""

    document: str
    entry: SymbolId
    visited: List[SymbolId] = field(default_factory=list)
    packages: List[str] = field(default_factory=list)


class Extractor:
    """Coordinates membership, loading, indexing, traversal and rendering."""

    def __init__(self, loader: PackageLoader | None = None) -> None:
        self.loader = loader or PackageLoader()
        self.logger = get_logger("extractor")

    def run(
        self,
        path: Path | str,
        function: str,
        *,
        package: Optional[str] = None,
        exclude_root: Optional[bool] = None,
        code_only: Optional[bool] = None,
        depth: Optional[int] = None,
    ) -> ExtractionResult:
        """Extract `function` and its in-project callees from the project at `path`.

        Arguments left as None fall back to .callslice.yml, then to the defaults.
        """
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise PackageLoadError(f"Project root {root} is not a directory")

        config = load_config(root)
        exclude_root = config.exclude_root if exclude_root is None else exclude_root
        code_only = config.code_only if code_only is None else code_only
        budget = self._budget(depth, config, exclude_root)

        membership = load_membership(root, package or config.package, config.packages)
        source_root = resolve_source_root(root, membership[0], config.source_root)
        path_filter = load_path_filter(root, config.exclude_paths)
        self.logger.info(
            "Extracting %s from %s (package %s, depth %d)",
            function,
            source_root,
            membership[0],
            budget,
        )

        project = self.loader.load(source_root, path_filter)
        index, entry = build_index(project.packages, membership, function)
        walker = CallGraphWalker(index, SemanticModel(project), SourceSlicer())
        walk = walker.walk(entry, budget, include_entry=not exclude_root)

        document = render_document(
            walk.order,
            walk.sources,
            exclude_root=exclude_root,
            code_only=code_only,
        )
        return ExtractionResult(
            document=document,
            entry=entry,
            visited=list(walk.visited),
            packages=[pkg.path for pkg in walk.order],
        )

    def _budget(self, depth: Optional[int], config: CallSliceConfig, exclude_root: bool) -> int:
        if depth is None:
            depth = config.depth
        if depth is None:
            return default_depth(exclude_root)
        if depth < 0:
            raise ConfigError("depth must not be negative")
        return depth


def extract_source(
    path: Path | str,
    function: str,
    *,
    package: Optional[str] = None,
    exclude_root: bool = False,
    code_only: bool = False,
    depth: Optional[int] = None,
) -> str:
    """Return the source of `function` and the project functions it calls."""
    result = Extractor().run(
        path,
        function,
        package=package,
        exclude_root=exclude_root,
        code_only=code_only,
        depth=depth,
    )
    return result.document


__all__ = ["ExtractionResult", "Extractor", "extract_source"]
