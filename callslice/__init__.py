"""Depth-bounded call-graph source extraction for Python projects."""

from .errors import (
    CallSliceError,
    ConfigError,
    EntryPointNotFoundError,
    ManifestUnreadableError,
    PackageLoadError,
    SourceReadError,
    WorkingDirectoryError,
)
from .extractor import ExtractionResult, Extractor, extract_source
from .models import SymbolId

__version__ = "0.1.0"

__all__ = [
    "CallSliceError",
    "ConfigError",
    "EntryPointNotFoundError",
    "ExtractionResult",
    "Extractor",
    "ManifestUnreadableError",
    "PackageLoadError",
    "SourceReadError",
    "SymbolId",
    "WorkingDirectoryError",
    "extract_source",
]
