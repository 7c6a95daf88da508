"""Refresh coordination for workspace size results.

SizeMonitor owns the "live scan" for a set of roots. It debounces refresh
requests, supersedes a running scan when a forced refresh arrives, and only
applies the results of a scan that was not cancelled, so at most one scan's
results ever reach the shared breakdown.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import StrEnum

from workspace_size.core.calculator import WorkspaceSizeCalculator
from workspace_size.core.cancellation import CancellationTokenSource
from workspace_size.core.exceptions import ScanError
from workspace_size.types import FolderSizeResult, Root
from workspace_size.utils.formatting import format_bytes
from workspace_size.utils.logging import get_logger, log_with_context

__all__ = ["DEFAULT_DEBOUNCE_SECONDS", "DEFAULT_SAVE_DEBOUNCE_SECONDS", "ScanStatus", "SizeMonitor"]

DEFAULT_DEBOUNCE_SECONDS = 0.75
DEFAULT_SAVE_DEBOUNCE_SECONDS = 1.5

type UpdateCallback = Callable[["SizeMonitor"], None]


class ScanStatus(StrEnum):
    READY = "ready"
    NO_ROOTS = "no_roots"
    CALCULATING = "calculating"
    DONE = "done"
    ERROR = "error"


class SizeMonitor:
    """Coordinate recalculations of a workspace's size.

    Provides:
    - Debounced scheduling of refreshes
    - Supersession of a running scan by a forced refresh
    - Discarding of cancelled or superseded scans' results
    - Text renderings of the latest breakdown
    """

    def __init__(
        self,
        calculator: WorkspaceSizeCalculator,
        roots: Sequence[Root] = (),
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        save_debounce_seconds: float = DEFAULT_SAVE_DEBOUNCE_SECONDS,
        on_update: UpdateCallback | None = None,
        logger_obj: logging.Logger | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            calculator: Calculator used for every scan
            roots: Initial workspace roots
            debounce_seconds: Default delay for scheduled refreshes
            save_debounce_seconds: Delay used by notify_saved
            on_update: Called whenever status or results change
            logger_obj: Logger override
        """
        self._calculator: WorkspaceSizeCalculator = calculator
        self._roots: tuple[Root, ...] = tuple(roots)
        self._debounce_seconds: float = debounce_seconds
        self._save_debounce_seconds: float = save_debounce_seconds
        self._on_update: UpdateCallback | None = on_update
        self._logger: logging.Logger = logger_obj or get_logger(__name__)

        self._current: CancellationTokenSource | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._pending_force: bool = False
        self._background: set[asyncio.Task[list[FolderSizeResult] | None]] = set()
        self._last_breakdown: list[FolderSizeResult] = []
        self._status: ScanStatus = ScanStatus.READY if self._roots else ScanStatus.NO_ROOTS
        self._is_calculating: bool = False
        self._last_error: ScanError | None = None

    @property
    def roots(self) -> tuple[Root, ...]:
        return self._roots

    @property
    def status(self) -> ScanStatus:
        return self._status

    @property
    def last_breakdown(self) -> list[FolderSizeResult]:
        return list(self._last_breakdown)

    @property
    def last_error(self) -> ScanError | None:
        return self._last_error

    @property
    def is_calculating(self) -> bool:
        return self._is_calculating

    @property
    def has_pending_refresh(self) -> bool:
        return self._timer is not None

    def set_roots(self, roots: Sequence[Root]) -> None:
        """Replace the workspace roots and schedule a recalculation.

        The scheduled refresh supersedes a scan of the old roots that is still
        running. Clearing the roots abandons the running scan outright.
        """
        self._roots = tuple(roots)
        if not self._roots:
            self._cancel_timer()
            self._abandon_current()
            self._set_status(ScanStatus.NO_ROOTS)
            return
        if self._status is ScanStatus.NO_ROOTS:
            self._set_status(ScanStatus.READY)
        self.schedule_refresh(force=True)

    def schedule_refresh(self, delay: float | None = None, *, force: bool = False) -> None:
        """Debounce a refresh: restart the timer so only the last request runs.

        Must be called from within a running event loop. Does nothing when
        there are no roots.

        Args:
            delay: Seconds to wait (defaults to the configured debounce)
            force: Supersede a running scan when the timer fires; sticky
                until the pending refresh runs
        """
        if not self._roots:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._pending_force = self._pending_force or force

        loop = asyncio.get_running_loop()
        wait = self._debounce_seconds if delay is None else max(0.0, delay)
        self._timer = loop.call_later(wait, self._fire_scheduled_refresh)

    def notify_saved(self) -> None:
        """Schedule a refresh after a document save, using the longer save delay."""
        self.schedule_refresh(self._save_debounce_seconds)

    def _fire_scheduled_refresh(self) -> None:
        self._timer = None
        force = self._pending_force
        self._pending_force = False
        task = asyncio.get_running_loop().create_task(self.refresh(force=force))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def refresh(self, *, force: bool = False) -> list[FolderSizeResult] | None:
        """Recalculate the workspace size.

        A non-forced refresh is ignored while a scan is running. A forced one
        cancels the running scan first; the superseded scan's results are
        thrown away even if it finishes later.

        Args:
            force: Supersede a scan that is already running

        Returns:
            The applied results, or None when the refresh was skipped,
            cancelled, superseded or failed
        """
        roots = self._roots
        if not roots:
            self._set_status(ScanStatus.NO_ROOTS)
            return None
        if self._is_calculating and not force:
            return None

        if self._current is not None:
            self._current.cancel()
            self._current.dispose()

        source = CancellationTokenSource()
        self._current = source
        self._is_calculating = True
        self._set_status(ScanStatus.CALCULATING)

        try:
            results = await self._calculator.calculate(roots, source.token)
            if source.is_cancellation_requested:
                if self._current is source:
                    self._set_status(ScanStatus.DONE if self._last_breakdown else ScanStatus.READY)
                return None

            self._last_breakdown = results
            self._last_error = None
            self._set_status(ScanStatus.DONE)
            return results
        except ScanError as exc:
            if self._current is not source:
                return None
            log_with_context(
                self._logger,
                logging.ERROR,
                "Failed to calculate workspace size",
                extra={"error": str(exc), "failed_roots": list(exc.failed_roots)},
            )
            self._last_error = exc
            self._set_status(ScanStatus.ERROR)
            return None
        finally:
            if self._current is source:
                source.dispose()
                self._current = None
                self._is_calculating = False

    def cancel(self) -> None:
        """Cancel the live scan, if any."""
        if self._current is not None:
            self._current.cancel()

    def dispose(self) -> None:
        """Stop the pending timer and cancel the live scan."""
        self._cancel_timer()
        self._abandon_current()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending_force = False

    def _abandon_current(self) -> None:
        # The abandoned refresh no longer owns the live state once _current
        # is cleared, so it cannot overwrite the status when it resumes.
        if self._current is not None:
            self._current.cancel()
            self._current.dispose()
            self._current = None
        self._is_calculating = False

    def total_size(self) -> int:
        return sum(result.size for result in self._last_breakdown)

    def status_text(self) -> str:
        """Short status line for an indicator."""
        match self._status:
            case ScanStatus.NO_ROOTS:
                return "No workspace"
            case ScanStatus.CALCULATING:
                return "Calculating…"
            case ScanStatus.ERROR:
                return "Size unavailable"
            case ScanStatus.DONE:
                return format_bytes(self.total_size())
            case _:
                return "Ready"

    def summary_lines(self) -> list[str]:
        """Total followed by the non-empty roots."""
        lines = [f"Total workspace size: {format_bytes(self.total_size())}"]
        breakdown = [
            f"{result.root.name}: {format_bytes(result.size)}" for result in self._last_breakdown if result.size > 0
        ]
        if breakdown:
            lines.append("")
            lines.extend(breakdown)
        return lines

    def detail_lines(self) -> list[str]:
        """One line per root, including empty ones."""
        if not self._last_breakdown:
            return ["Workspace size has not been calculated yet."]
        return [f"{result.root.name}: {format_bytes(result.size)}" for result in self._last_breakdown]

    def _set_status(self, status: ScanStatus) -> None:
        self._status = status
        if self._on_update is not None:
            self._on_update(self)
