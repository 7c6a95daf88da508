"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols for the collaborators the
size calculator relies on, without requiring inheritance.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from workspace_size.types.models import DirectoryEntry, FileStat


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for the two filesystem primitives used by a scan.

    Implementations may be backed by the local disk, a remote share or an
    in-memory tree. Neither method offers a recursive size; a scan is built
    entirely from listings and stats.
    """

    async def read_directory(self, location: Path) -> Sequence[DirectoryEntry]:
        """List the entries of a directory.

        Args:
            location: Directory to list

        Returns:
            Entries with their coarse type hints

        Raises:
            OSError: If the directory cannot be listed
        """
        ...

    async def stat(self, location: Path) -> FileStat:
        """Resolve the authoritative type and size of a location.

        Args:
            location: Path to stat

        Returns:
            Type flags and logical size in bytes

        Raises:
            OSError: If the location is no longer accessible
        """
        ...


@runtime_checkable
class CancellationSignal(Protocol):
    """Read-only view of a scan's cancellation state."""

    @property
    def is_cancellation_requested(self) -> bool:
        """Whether cancellation has been requested for the scan."""
        ...
