"""Workspace size calculator aggregating per-root traversals.

This module implements the WorkspaceSizeCalculator class responsible for
measuring every root of a workspace concurrently using asyncio.TaskGroup,
with one TraversalEngine run per root and a single cancellation token shared
by the whole scan.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from uuid import uuid4

from workspace_size.core.exceptions import ScanError
from workspace_size.core.filesystem import LocalFileSystem
from workspace_size.core.stat_dispatcher import DEFAULT_STAT_CONCURRENCY, StatDispatcher
from workspace_size.core.traversal import TraversalEngine
from workspace_size.types import CancellationSignal, FileSystem, FolderSizeResult, Root
from workspace_size.utils.logging import (
    get_logger,
    log_with_context,
    reset_scan_id,
    set_scan_id,
)

__all__ = ["WorkspaceSizeCalculator"]

type ScanIDFactory = Callable[[], str]


class WorkspaceSizeCalculator:
    """Compute the total size of each workspace root concurrently."""

    def __init__(
        self,
        file_system: FileSystem | None = None,
        *,
        stat_concurrency: int = DEFAULT_STAT_CONCURRENCY,
        scan_id_factory: ScanIDFactory | None = None,
        logger_obj: logging.Logger | None = None,
    ) -> None:
        """Initialize the calculator.

        Args:
            file_system: Filesystem primitives to scan through (defaults to the local disk)
            stat_concurrency: Maximum outstanding stats per directory batch;
                values below 1 are raised to 1
            scan_id_factory: Factory for scan IDs attached to log records
            logger_obj: Logger override
        """
        self._file_system: FileSystem = file_system if file_system is not None else LocalFileSystem()
        self._dispatcher: StatDispatcher = StatDispatcher(self._file_system, concurrency=stat_concurrency)
        self._engine: TraversalEngine = TraversalEngine(self._file_system, self._dispatcher)
        self._scan_id_factory: ScanIDFactory = scan_id_factory or (lambda: uuid4().hex[:12])
        self._logger: logging.Logger = logger_obj or get_logger(__name__)

    @property
    def stat_concurrency(self) -> int:
        return self._dispatcher.concurrency

    async def calculate(
        self,
        roots: Sequence[Root],
        token: CancellationSignal,
    ) -> list[FolderSizeResult]:
        """Measure every root and pair each with its total size.

        Roots are traversed concurrently and independently; the result list
        follows the order of ``roots``, not completion order.

        A cancelled scan is not an error: the partial totals gathered before
        the traversals noticed the token are returned, and callers holding a
        cancelled token should discard them.

        Args:
            roots: Roots to measure, in display order
            token: Cancellation signal shared by every traversal of this scan

        Returns:
            One FolderSizeResult per root, in input order

        Raises:
            ScanError: If any root's traversal fails with an error other than
                the per-entry listing and stat failures it absorbs. No
                partial results are returned in that case.
        """
        if not roots:
            return []

        scan_token = set_scan_id(self._scan_id_factory())
        start = time.perf_counter()
        try:
            log_with_context(
                self._logger,
                logging.DEBUG,
                "Workspace scan started",
                extra={"root_count": len(roots), "stat_concurrency": self.stat_concurrency},
            )

            tasks: list[asyncio.Task[int]] = []
            try:
                async with asyncio.TaskGroup() as task_group:
                    for root in roots:
                        tasks.append(task_group.create_task(self._engine.compute_folder_size(root.location, token)))
            except ExceptionGroup as group:
                failed = tuple(
                    root.name
                    for root, task in zip(roots, tasks)
                    if task.done() and not task.cancelled() and task.exception() is not None
                )
                log_with_context(
                    self._logger,
                    logging.ERROR,
                    "Workspace scan failed",
                    extra={"failed_roots": list(failed), "error": repr(group.exceptions[0])},
                )
                msg = f"Workspace scan failed: {group.exceptions[0]!r}"
                raise ScanError(msg, failed_roots=failed) from group

            results = [FolderSizeResult(root=root, size=task.result()) for root, task in zip(roots, tasks)]

            elapsed_ms = (time.perf_counter() - start) * 1000.0
            if token.is_cancellation_requested:
                log_with_context(
                    self._logger,
                    logging.DEBUG,
                    "Workspace scan cancelled",
                    extra={"elapsed_ms": round(elapsed_ms, 1)},
                )
            else:
                log_with_context(
                    self._logger,
                    logging.INFO,
                    "Workspace scan complete",
                    extra={
                        "root_count": len(results),
                        "total_bytes": sum(result.size for result in results),
                        "elapsed_ms": round(elapsed_ms, 1),
                    },
                )
            return results
        finally:
            reset_scan_id(scan_token)
