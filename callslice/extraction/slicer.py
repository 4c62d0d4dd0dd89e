"""Exact source text of function declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from ..errors import SourceReadError
from ..models import CompilationUnit, FunctionDeclaration


class SourceSlicer:
    """Slices declarations out of their files, reading each file at most once per run."""

    def __init__(self) -> None:
        self._lines: Dict[Path, List[str]] = {}

    def slice(self, declaration: FunctionDeclaration, unit: CompilationUnit) -> str:
        """Return the declaration's comment block and definition, line by line, verbatim.

        Every emitted line ends with a newline. The file is re-read from disk so the
        text matches what is there now, not what was parsed.
        """
        lines = self._read_lines(unit.path)
        parts: List[str] = []

        for comment in declaration.doc_comments:
            parts.extend(_line_range(lines, comment.start_point[0], comment.end_point[0], unit.path))

        start = declaration.definition.start_point[0]
        end = declaration.definition.end_point[0]
        parts.extend(_line_range(lines, start, end, unit.path))
        return "".join(parts)

    def _read_lines(self, path: Path) -> List[str]:
        cached: Optional[List[str]] = self._lines.get(path)
        if cached is not None:
            return cached
        try:
            # Bytes, not text mode: line endings stay as they are on disk.
            text = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(path, str(exc)) from exc
        lines = text.split("\n")
        self._lines[path] = lines
        return lines


def _line_range(lines: List[str], first: int, last: int, path: Path) -> List[str]:
    if last >= len(lines):
        raise SourceReadError(path, f"line {last + 1} is past the end of the file")
    return [f"{lines[row]}\n" for row in range(first, last + 1)]


def slice_declaration(declaration: FunctionDeclaration, unit: CompilationUnit) -> str:
    return SourceSlicer().slice(declaration, unit)


__all__ = ["SourceSlicer", "slice_declaration"]
