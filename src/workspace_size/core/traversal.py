"""Per-root traversal computing the total size of regular files.

The engine walks one root with an explicit frontier instead of recursion.
Each iteration lists one directory, classifies its entries from the listing
type hints, and resolves the entries that need an authoritative lookup in a
single batch through the StatDispatcher.

Classification rules:
- Symbolic links are skipped entirely; they are never followed or sized
- Directories are pushed onto the frontier without a stat
- Files are statted and counted only if the stat still reports a file
- Unknown entries are statted and resolved to a directory or a file

Listing and stat failures (OSError) are local: the directory or file simply
contributes nothing. Any other exception propagates to the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from workspace_size.core.stat_dispatcher import StatDispatcher
from workspace_size.types import CancellationSignal, DirectoryEntry, FileStat, FileSystem, FileType

__all__ = ["TraversalEngine"]

type StatResolver = Callable[[FileStat], None]


def _is_link(file_type: FileType) -> bool:
    return bool(file_type & FileType.SYMBOLIC_LINK)


def _is_directory(file_type: FileType) -> bool:
    return bool(file_type & FileType.DIRECTORY) and not _is_link(file_type)


def _is_file(file_type: FileType) -> bool:
    return bool(file_type & FileType.FILE) and not _is_link(file_type)


@dataclass(slots=True)
class _TraversalState:
    """Mutable state owned by a single root's traversal."""

    frontier: list[Path]
    visited: set[str] = field(default_factory=set)
    total_size: int = 0

    def add_file(self, stat: FileStat) -> None:
        self.total_size += stat.size


class TraversalEngine:
    """Compute the size of one root through listings and batched stats.

    An engine holds no per-scan state; every ``compute_folder_size`` call owns
    its own frontier, visited set and accumulator, so one engine can serve
    several roots concurrently.
    """

    def __init__(self, file_system: FileSystem, dispatcher: StatDispatcher) -> None:
        self._file_system: FileSystem = file_system
        self._dispatcher: StatDispatcher = dispatcher

    async def compute_folder_size(self, location: Path, token: CancellationSignal) -> int:
        """Sum the logical sizes of all regular files beneath ``location``.

        Args:
            location: Root directory to measure
            token: Cancellation signal shared by the whole scan

        Returns:
            Total size in bytes. A root that is missing, inaccessible or not a
            directory yields 0. When the scan is cancelled the partial total
            accumulated so far is returned and should be discarded.
        """
        state = _TraversalState(frontier=[location])

        while state.frontier and not token.is_cancellation_requested:
            directory = state.frontier.pop()

            key = str(directory)
            if key in state.visited:
                continue
            state.visited.add(key)

            try:
                entries = await self._file_system.read_directory(directory)
            except OSError:
                continue

            requests = self._classify(directory, entries, state, token)
            if not requests:
                continue

            locations = [request_location for request_location, _ in requests]
            results = await self._dispatcher.resolve_all(locations, token)
            for (_, resolve), result in zip(requests, results):
                if result.stat is not None:
                    resolve(result.stat)

        return state.total_size

    def _classify(
        self,
        directory: Path,
        entries: Sequence[DirectoryEntry],
        state: _TraversalState,
        token: CancellationSignal,
    ) -> list[tuple[Path, StatResolver]]:
        requests: list[tuple[Path, StatResolver]] = []

        for entry in entries:
            if token.is_cancellation_requested:
                break

            entry_location = directory / entry.name

            if _is_link(entry.type):
                continue

            if entry.type & FileType.DIRECTORY:
                state.frontier.append(entry_location)
                continue

            if entry.type & FileType.FILE:
                requests.append((entry_location, self._file_resolver(state)))
                continue

            requests.append((entry_location, self._unknown_resolver(entry_location, state)))

        return requests

    @staticmethod
    def _file_resolver(state: _TraversalState) -> StatResolver:
        def resolve(stat: FileStat) -> None:
            if _is_file(stat.type):
                state.add_file(stat)

        return resolve

    @staticmethod
    def _unknown_resolver(location: Path, state: _TraversalState) -> StatResolver:
        # The stat is authoritative over the listing hint.
        def resolve(stat: FileStat) -> None:
            if _is_directory(stat.type):
                state.frontier.append(location)
            elif _is_file(stat.type):
                state.add_file(stat)

        return resolve
