"""Semantic model of a Python project: packages, declarations and call resolution."""

from .loader import PackageLoader, Project, resolve_source_root
from .parser import SourceParser
from .resolver import SemanticModel
from .scanner import PathFilter, load_path_filter

__all__ = [
    "PackageLoader",
    "PathFilter",
    "Project",
    "SemanticModel",
    "SourceParser",
    "load_path_filter",
    "resolve_source_root",
]
