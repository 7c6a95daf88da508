"""Bounded-concurrency stat dispatch.

This module implements the StatDispatcher responsible for resolving a batch
of locations through FileSystem.stat with a fixed cap on outstanding calls
per batch. Concurrent callers, such as the traversals of several roots, each
get their own cap.
The batch is cut into chunks no wider than the cap; each chunk runs in an
asyncio.TaskGroup and is joined before the next one starts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from workspace_size.types import CancellationSignal, FileSystem, StatResult

__all__ = ["DEFAULT_STAT_CONCURRENCY", "StatDispatcher"]

DEFAULT_STAT_CONCURRENCY: Final[int] = 32


class StatDispatcher:
    """Resolve each batch of stats with at most ``concurrency`` of it in flight."""

    def __init__(
        self,
        file_system: FileSystem,
        *,
        concurrency: int = DEFAULT_STAT_CONCURRENCY,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            file_system: Filesystem providing the stat primitive
            concurrency: Maximum outstanding stats per batch; values below 1 are raised to 1
        """
        self._file_system: FileSystem = file_system
        self._concurrency: int = max(1, concurrency)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def resolve_all(
        self,
        locations: Sequence[Path],
        token: CancellationSignal,
    ) -> list[StatResult]:
        """Stat every location, honoring the concurrency cap and cancellation.

        Results come back in input order. A stat failing with OSError yields
        an absent result for that location only. When cancellation is
        observed after a chunk joins, that chunk is discarded and the rest of
        the batch is abandoned, so the returned list is a prefix of the input
        holding only delivered results.

        Args:
            locations: Locations to stat
            token: Cancellation signal of the running scan

        Returns:
            Delivered stat results, in input order

        Raises:
            Exception: Any non-OSError raised by the filesystem is fatal and
                propagates (wrapped in an ExceptionGroup by the task group)
        """
        results: list[StatResult] = []
        if not locations or token.is_cancellation_requested:
            return results

        for start in range(0, len(locations), self._concurrency):
            if token.is_cancellation_requested:
                break

            chunk = locations[start : start + self._concurrency]
            async with asyncio.TaskGroup() as task_group:
                tasks = [task_group.create_task(self._stat_one(location, token)) for location in chunk]

            if token.is_cancellation_requested:
                break

            results.extend(task.result() for task in tasks)

        return results

    async def _stat_one(self, location: Path, token: CancellationSignal) -> StatResult:
        if token.is_cancellation_requested:
            return StatResult(location=location, stat=None)
        try:
            stat = await self._file_system.stat(location)
        except OSError:
            return StatResult(location=location, stat=None)
        return StatResult(location=location, stat=stat)
