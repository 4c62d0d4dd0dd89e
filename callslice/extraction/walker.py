"""Depth-bounded traversal of the project call graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from ..logging import get_logger
from ..models import Package, SymbolId
from ..semantic.resolver import SemanticModel
from .index import SymbolIndex
from .slicer import SourceSlicer

DEFAULT_DEPTH = 5
# The entry point consumes one hop when it is left out of the document.
DEFAULT_DEPTH_EXCLUDING_ROOT = 6


def default_depth(exclude_root: bool) -> int:
    return DEFAULT_DEPTH_EXCLUDING_ROOT if exclude_root else DEFAULT_DEPTH


@dataclass
class WalkResult:
    """Packages in first-visited order and the source accumulated for each."""

    entry: SymbolId
    order: List[Package] = field(default_factory=list)
    sources: Dict[str, str] = field(default_factory=dict)
    visited: List[SymbolId] = field(default_factory=list)

    def functions(self) -> List[SymbolId]:
        """Visited functions other than the entry point, in visit order."""
        return [symbol for symbol in self.visited if symbol != self.entry]


class CallGraphWalker:
    """Collects the source of a function and of the project functions it calls.

    Each function is processed once: recursion and shared callees are visited
    a single time, in depth-first source order of the calls.
    """

    def __init__(
        self,
        index: SymbolIndex,
        model: SemanticModel,
        slicer: SourceSlicer | None = None,
    ) -> None:
        self._index = index
        self._model = model
        self._slicer = slicer or SourceSlicer()
        self.logger = get_logger("walker")

    def walk(self, entry: SymbolId, depth: int, *, include_entry: bool = True) -> WalkResult:
        """Walk from `entry` with a budget of `depth` hops.

        A function at call-distance d keeps `depth - d` hops and has its calls
        followed while that is positive. Without the entry point the entry itself
        uses one hop of the budget.
        """
        result = WalkResult(entry=entry)
        seen: Set[SymbolId] = set()
        remaining = depth if include_entry else depth - 1
        self._visit(entry, remaining, result, seen, emit=include_entry)
        self.logger.info(
            "Visited %d functions in %d packages from %s",
            len(result.visited),
            len(result.order),
            entry,
        )
        return result

    def _visit(
        self,
        symbol: SymbolId,
        remaining: int,
        result: WalkResult,
        seen: Set[SymbolId],
        *,
        emit: bool = True,
    ) -> None:
        if symbol in seen:
            return
        entry = self._index.get(symbol)
        if entry is None:
            # Outside the project or not a declaration we index.
            return

        package = entry.package
        if package.path not in result.sources:
            result.order.append(package)
            result.sources[package.path] = ""
        if emit:
            result.sources[package.path] += "\n" + self._slicer.slice(entry.declaration, entry.unit)
        seen.add(symbol)
        result.visited.append(symbol)
        self.logger.debug("Visited %s (%d hops left)", symbol, remaining)

        if remaining <= 0 or not entry.declaration.has_body:
            return
        for site in self._model.call_sites(entry.declaration, entry.unit):
            if site.target is not None:
                self._visit(site.target, remaining - 1, result, seen)


__all__ = [
    "CallGraphWalker",
    "DEFAULT_DEPTH",
    "DEFAULT_DEPTH_EXCLUDING_ROOT",
    "WalkResult",
    "default_depth",
]
