"""Local-disk implementation of the filesystem primitives.

Listing and stat syscalls block, so both are offloaded to the default thread
pool with asyncio.to_thread. The event loop stays the single logical thread
of control; worker threads only host the syscalls themselves.

Neither primitive follows symbolic links: listings classify entries without
resolving them and ``stat`` uses ``lstat``, so a link is always reported as
SYMBOLIC_LINK.
"""

import asyncio
import os
import stat
from collections.abc import Sequence
from pathlib import Path

from workspace_size.types.models import DirectoryEntry, FileStat, FileType

__all__ = ["LocalFileSystem", "file_type_from_mode"]


def file_type_from_mode(mode: int) -> FileType:
    """Map an ``st_mode`` value to file type flags.

    Args:
        mode: Mode bits from an ``os.stat_result``

    Returns:
        FILE for regular files, DIRECTORY for directories, SYMBOLIC_LINK for
        links, UNKNOWN for sockets, pipes and devices
    """
    if stat.S_ISLNK(mode):
        return FileType.SYMBOLIC_LINK
    if stat.S_ISDIR(mode):
        return FileType.DIRECTORY
    if stat.S_ISREG(mode):
        return FileType.FILE
    return FileType.UNKNOWN


def _entry_type(entry: os.DirEntry[str]) -> FileType:
    # An entry that vanishes mid-listing is UNKNOWN; the follow-up stat
    # resolves or drops it.
    try:
        if entry.is_symlink():
            return FileType.SYMBOLIC_LINK
        if entry.is_dir(follow_symlinks=False):
            return FileType.DIRECTORY
        if entry.is_file(follow_symlinks=False):
            return FileType.FILE
    except OSError:
        pass
    return FileType.UNKNOWN


def _read_directory_sync(location: Path) -> list[DirectoryEntry]:
    with os.scandir(location) as iterator:
        return [DirectoryEntry(name=entry.name, type=_entry_type(entry)) for entry in iterator]


def _stat_sync(location: Path) -> FileStat:
    result = os.lstat(location)
    return FileStat(type=file_type_from_mode(result.st_mode), size=result.st_size)


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    async def read_directory(self, location: Path) -> Sequence[DirectoryEntry]:
        """List a directory without following links.

        Raises:
            OSError: If the directory is missing, unreadable or not a directory
        """
        return await asyncio.to_thread(_read_directory_sync, location)

    async def stat(self, location: Path) -> FileStat:
        """Stat a location without following links.

        Raises:
            OSError: If the location is missing or inaccessible
        """
        return await asyncio.to_thread(_stat_sync, location)
