"""Type definitions and protocols for workspace-size.

This package provides:
- Data models (immutable dataclasses and file type flags)
- Protocol definitions (structural subtyping interfaces)
"""

from workspace_size.types.models import (
    DirectoryEntry,
    FileStat,
    FileType,
    FolderSizeResult,
    Root,
    StatResult,
)
from workspace_size.types.protocols import (
    CancellationSignal,
    FileSystem,
)

__all__ = [
    # Data models
    "DirectoryEntry",
    "FileStat",
    "FileType",
    "FolderSizeResult",
    "Root",
    "StatResult",
    # Protocols
    "CancellationSignal",
    "FileSystem",
]
