"""Data models for workspace-size.

This module defines the immutable dataclasses and type flags passed between
the filesystem layer, the traversal engine and the calculator.
"""

from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path


class FileType(IntFlag):
    """Coarse file type flags reported by listings and stats.

    Flags combine: a symbolic link pointing at a directory may be reported
    as ``DIRECTORY | SYMBOLIC_LINK``.
    """

    UNKNOWN = 0
    FILE = 1
    DIRECTORY = 2
    SYMBOLIC_LINK = 64


@dataclass(slots=True, frozen=True)
class Root:
    """A caller-designated directory whose total size is measured.

    Roots are owned by the caller; the calculator only reads them and pairs
    each one with its result.
    """

    name: str
    location: Path

    @classmethod
    def from_path(cls, path: Path, *, name: str | None = None) -> "Root":
        """Build a root labelled with the directory name unless one is given.

        Args:
            path: Directory location
            name: Optional display label

        Returns:
            Root for the given location
        """
        label = name or path.name or str(path)
        return cls(name=label, location=path)


@dataclass(slots=True, frozen=True)
class DirectoryEntry:
    """One item of a directory listing: a single path segment and its type hint."""

    name: str
    type: FileType


@dataclass(slots=True, frozen=True)
class FileStat:
    """Authoritative type and logical size of a path."""

    type: FileType
    size: int


@dataclass(slots=True, frozen=True)
class StatResult:
    """Outcome of resolving one location's metadata.

    ``stat`` is None when the location became inaccessible between listing
    and statting (removed, permission denied, broken link target).
    """

    location: Path
    stat: FileStat | None

    @property
    def found(self) -> bool:
        return self.stat is not None


@dataclass(slots=True, frozen=True)
class FolderSizeResult:
    """A root paired with the total size of the regular files beneath it."""

    root: Root
    size: int
