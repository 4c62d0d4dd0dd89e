"""Symbol index over the project's own packages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple

from ..errors import EntryPointNotFoundError
from ..logging import get_logger
from ..manifest import is_member
from ..models import CompilationUnit, FunctionDeclaration, Package, SymbolId

_logger = get_logger("index")


@dataclass(frozen=True)
class IndexEntry:
    declaration: FunctionDeclaration
    unit: CompilationUnit
    package: Package


class SymbolIndex:
    """Maps each SymbolId to its declaration, compilation unit and package."""

    def __init__(self) -> None:
        self._entries: Dict[SymbolId, IndexEntry] = {}

    def add(self, declaration: FunctionDeclaration, unit: CompilationUnit, package: Package) -> None:
        # A redeclared symbol keeps its last declaration.
        self._entries[declaration.symbol] = IndexEntry(declaration, unit, package)

    def get(self, symbol: SymbolId) -> Optional[IndexEntry]:
        return self._entries.get(symbol)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SymbolId]:
        return iter(self._entries)


def build_index(
    packages: Iterable[Package],
    membership: Sequence[str],
    entry_name: str,
) -> Tuple[SymbolIndex, SymbolId]:
    """Index every declaration of the member packages and locate the entry point.

    `membership[0]` is the primary package; the entry point is the declaration
    there whose qualified name equals `entry_name`.
    """
    primary = membership[0]
    index = SymbolIndex()
    entry: Optional[SymbolId] = None

    for package in packages:
        if not is_member(membership, package.path):
            continue
        for unit in package.units:
            for declaration in unit.declarations:
                index.add(declaration, unit, package)
                if package.path == primary and declaration.qualname == entry_name:
                    entry = declaration.symbol

    if entry is None:
        raise EntryPointNotFoundError(entry_name, primary)

    _logger.debug("Indexed %d functions; entry point is %s", len(index), entry)
    return index, entry


__all__ = ["IndexEntry", "SymbolIndex", "build_index"]
