"""Call-graph extraction: index, slicing, traversal and rendering."""

from .assembler import render_document
from .index import IndexEntry, SymbolIndex, build_index
from .slicer import SourceSlicer, slice_declaration
from .walker import (
    DEFAULT_DEPTH,
    DEFAULT_DEPTH_EXCLUDING_ROOT,
    CallGraphWalker,
    WalkResult,
    default_depth,
)

__all__ = [
    "CallGraphWalker",
    "DEFAULT_DEPTH",
    "DEFAULT_DEPTH_EXCLUDING_ROOT",
    "IndexEntry",
    "SourceSlicer",
    "SymbolIndex",
    "WalkResult",
    "build_index",
    "default_depth",
    "render_document",
    "slice_declaration",
]
