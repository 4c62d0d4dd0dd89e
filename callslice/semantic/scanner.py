"""Source file discovery honoring .gitignore and configured exclusions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

_EXCLUDED_DIRS = {
    "venv",
    "node_modules",
    "__pycache__",
    "build",
    "dist",
    "site-packages",
}

_SOURCE_SUFFIX = ".py"


@dataclass(frozen=True)
class IgnoreRule:
    """One gitignore-style pattern, relative to the project root."""

    pattern: str
    directory_only: bool = False
    anchored: bool = False
    negate: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        text = line.strip()
        negate = text.startswith("!")
        if negate:
            text = text[1:]
        directory_only = text.endswith("/")
        text = text.rstrip("/")
        # A slash anywhere but at the end ties the pattern to the root.
        anchored = "/" in text
        text = text.lstrip("/")
        if not text:
            return None
        return cls(text, directory_only, anchored, negate)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.pattern)


class PathFilter:
    """Decides which files and directories below a project root are skipped.

    Rules are matched against paths relative to `root`, whatever directory the
    walk starts from. Excluded directories are pruned, so a rule naming a
    directory also hides everything below it.
    """

    def __init__(self, root: Path, rules: Sequence[IgnoreRule] = ()) -> None:
        self.root = root.resolve()
        self.rules = list(rules)

    def excludes(self, path: Path, is_dir: bool) -> bool:
        if is_dir and (path.name in _EXCLUDED_DIRS or path.name.startswith(".")):
            return True
        rel_path = self._relative(path)
        excluded = False
        for rule in self.rules:
            if rule.matches(rel_path, is_dir):
                excluded = not rule.negate
        return excluded

    def _relative(self, path: Path) -> str:
        if path.is_relative_to(self.root):
            return path.relative_to(self.root).as_posix()
        # Outside the project root only the path's own name can match.
        return path.name


def load_path_filter(root: Path, exclude_paths: Iterable[str] = ()) -> PathFilter:
    """Build the filter from `<root>/.gitignore` followed by configured exclusions."""
    rules = _read_gitignore(root / ".gitignore")
    rules.extend(rule for rule in map(IgnoreRule.parse, exclude_paths) if rule is not None)
    return PathFilter(root, rules)


def _read_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.is_file():
        return []
    rules: List[IgnoreRule] = []
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if line.lstrip().startswith("#"):
            continue
        rule = IgnoreRule.parse(line)
        if rule is not None:
            rules.append(rule)
    return rules


def iter_source_files(source_root: Path, path_filter: PathFilter | None = None) -> Iterator[Path]:
    """Yield Python files under `source_root` in sorted, deterministic order."""
    source_root = source_root.resolve()
    path_filter = path_filter or PathFilter(source_root)
    for dirpath, dirnames, filenames in os.walk(source_root):
        current = Path(dirpath)
        dirnames[:] = [
            name for name in sorted(dirnames) if not path_filter.excludes(current / name, True)
        ]
        for filename in sorted(filenames):
            path = current / filename
            if filename.endswith(_SOURCE_SUFFIX) and not path_filter.excludes(path, False):
                yield path


__all__ = ["IgnoreRule", "PathFilter", "iter_source_files", "load_path_filter"]
