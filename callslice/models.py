"""Core data models shared across callslice components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tree_sitter import Node, Tree


@dataclass(frozen=True, order=True)
class SymbolId:
    """Identity of a function declaration: its module path and qualified name."""

    module: str
    qualname: str

    def __str__(self) -> str:
        return f"{self.module}:{self.qualname}"


@dataclass
class FunctionDeclaration:
    """A `def` at module level or inside a class body."""

    symbol: SymbolId
    name: str
    definition: Node
    function: Node
    owner_class: Optional[str] = None
    doc_comments: List[Node] = field(default_factory=list)
    has_body: bool = True

    @property
    def qualname(self) -> str:
        return self.symbol.qualname

    @property
    def body(self) -> Optional[Node]:
        return self.function.child_by_field_name("body") if self.has_body else None


@dataclass
class CompilationUnit:
    """One parsed source file."""

    module: str
    path: Path
    source: bytes
    tree: Tree
    is_package_init: bool = False
    declarations: List[FunctionDeclaration] = field(default_factory=list)

    @property
    def package_path(self) -> str:
        """Import path used to resolve relative imports from this unit."""
        if self.is_package_init:
            return self.module
        return self.module.rpartition(".")[0]


@dataclass
class Package:
    """Compilation units that share one import path."""

    path: str
    directory: Path
    units: List[CompilationUnit] = field(default_factory=list)


@dataclass
class CallSite:
    """A call expression in a function body and the symbol it resolves to."""

    node: Node
    target: Optional[SymbolId]


__all__ = ["CallSite", "CompilationUnit", "FunctionDeclaration", "Package", "SymbolId"]
