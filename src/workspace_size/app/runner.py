"""Application runner for workspace-size.

Coordinates one command-line scan: configuration loading, logging setup,
signal and deadline handling, and rendering of the results.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from workspace_size.app.monitor import ScanStatus, SizeMonitor
from workspace_size.core.calculator import WorkspaceSizeCalculator
from workspace_size.core.config import AppConfig, load_config
from workspace_size.types import FileSystem, FolderSizeResult, Root
from workspace_size.utils.formatting import format_bytes
from workspace_size.utils.logging import configure_logging

# Exit codes
EXIT_SUCCESS: Final[int] = 0
EXIT_SCAN_ERROR: Final[int] = 1
EXIT_CANCELLED: Final[int] = 130

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ScanReport:
    """Outcome of a command-line scan."""

    results: tuple[FolderSizeResult, ...]
    cancelled: bool = False
    error_message: str | None = None

    @property
    def total_size(self) -> int:
        return sum(result.size for result in self.results)

    @property
    def exit_code(self) -> int:
        if self.cancelled:
            return EXIT_CANCELLED
        if self.error_message is not None:
            return EXIT_SCAN_ERROR
        return EXIT_SUCCESS


def render_text(report: ScanReport) -> str:
    """Render results as aligned ``name  size`` lines followed by the total."""
    rows = [(result.root.name, format_bytes(result.size)) for result in report.results]
    rows.append(("Total", format_bytes(report.total_size)))
    name_width = max(len(name) for name, _ in rows)
    size_width = max(len(size) for _, size in rows)
    return "\n".join(f"{name:<{name_width}}  {size:>{size_width}}" for name, size in rows)


def render_json(report: ScanReport) -> str:
    payload = {
        "roots": [
            {
                "name": result.root.name,
                "path": str(result.root.location),
                "size": result.size,
                "size_human": format_bytes(result.size),
            }
            for result in report.results
        ],
        "total": report.total_size,
        "total_human": format_bytes(report.total_size),
    }
    return json.dumps(payload, indent=2)


class ApplicationRunner:
    """Run a single workspace scan from the command line."""

    def __init__(
        self,
        *,
        config_path: Path | None = None,
        roots: Sequence[Path] = (),
        stat_concurrency: int | None = None,
        timeout: float | None = None,
        log_level: str | None = None,
        file_system: FileSystem | None = None,
    ) -> None:
        """Initialize the application runner.

        Args:
            config_path: Configuration file (None for defaults)
            roots: Root directories given on the command line
            stat_concurrency: Override for scanner.stat_concurrency
            timeout: Seconds after which the scan is cancelled
            log_level: Override for application.log_level
            file_system: Filesystem override (defaults to the local disk)
        """
        self.config_path: Path | None = config_path
        self.roots: tuple[Path, ...] = tuple(roots)
        self.stat_concurrency: int | None = stat_concurrency
        self.timeout: float | None = timeout
        self.log_level: str | None = log_level
        self.file_system: FileSystem | None = file_system

    def load_config(self) -> AppConfig:
        """Load the configuration file, or defaults when none was given.

        Raises:
            ConfigurationError: If the configuration file is invalid
        """
        if self.config_path is None:
            return AppConfig()
        return load_config(self.config_path)

    def resolve_roots(self, config: AppConfig) -> list[Root]:
        """Pick roots from the command line, then configuration, then the cwd."""
        if self.roots:
            return [Root.from_path(path.expanduser().absolute()) for path in self.roots]
        configured = config.root_objects()
        if configured:
            return configured
        return [Root.from_path(Path.cwd())]

    def run(self) -> ScanReport:
        """Load configuration and run the scan to completion.

        Raises:
            ConfigurationError: If the configuration file is invalid
        """
        config = self.load_config()
        configure_logging(log_level=self.log_level or config.application.log_level)
        return asyncio.run(self.run_async(config))

    async def run_async(self, config: AppConfig) -> ScanReport:
        roots = self.resolve_roots(config)
        concurrency = self.stat_concurrency or config.scanner.stat_concurrency
        calculator = WorkspaceSizeCalculator(self.file_system, stat_concurrency=concurrency)
        monitor = SizeMonitor(
            calculator,
            roots,
            debounce_seconds=config.refresh.debounce_seconds,
            save_debounce_seconds=config.refresh.save_debounce_seconds,
        )

        logger.info(
            "Scanning workspace",
            extra={"roots": [str(root.location) for root in roots], "stat_concurrency": concurrency},
        )

        loop = asyncio.get_running_loop()
        installed_signals: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, monitor.cancel)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform or outside the main thread
                continue
            installed_signals.append(sig)

        deadline: asyncio.TimerHandle | None = None
        if self.timeout is not None:
            deadline = loop.call_later(self.timeout, monitor.cancel)

        try:
            results = await monitor.refresh(force=True)
        finally:
            if deadline is not None:
                deadline.cancel()
            for sig in installed_signals:
                _ = loop.remove_signal_handler(sig)
            monitor.dispose()

        if results is not None:
            return ScanReport(results=tuple(results))
        if monitor.status is ScanStatus.ERROR and monitor.last_error is not None:
            return ScanReport(results=(), error_message=str(monitor.last_error))
        return ScanReport(results=(), cancelled=True, error_message="Scan cancelled")
