"""Workspace Size - compute the total size of workspace directory trees.

This package measures every root of a workspace through two filesystem
primitives (list a directory, stat a path), with bounded stat concurrency
and cooperative cancellation.
"""

from workspace_size.core import (
    CancellationToken,
    CancellationTokenSource,
    LocalFileSystem,
    ScanError,
    WorkspaceSizeCalculator,
)
from workspace_size.types import FolderSizeResult, Root
from workspace_size.utils.formatting import format_bytes

__all__ = [
    "CancellationToken",
    "CancellationTokenSource",
    "FolderSizeResult",
    "LocalFileSystem",
    "Root",
    "ScanError",
    "WorkspaceSizeCalculator",
    "format_bytes",
]
