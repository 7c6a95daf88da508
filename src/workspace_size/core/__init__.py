"""Size calculation core.

Computes the total size of regular files beneath each workspace root using
only directory listings and stats, with bounded stat concurrency and
cooperative cancellation.
"""

from workspace_size.core.calculator import WorkspaceSizeCalculator
from workspace_size.core.cancellation import CancellationToken, CancellationTokenSource
from workspace_size.core.exceptions import ScanError
from workspace_size.core.filesystem import LocalFileSystem
from workspace_size.core.stat_dispatcher import DEFAULT_STAT_CONCURRENCY, StatDispatcher
from workspace_size.core.traversal import TraversalEngine

__all__ = [
    "DEFAULT_STAT_CONCURRENCY",
    "CancellationToken",
    "CancellationTokenSource",
    "LocalFileSystem",
    "ScanError",
    "StatDispatcher",
    "TraversalEngine",
    "WorkspaceSizeCalculator",
]
