"""Application module for workspace-size."""

from __future__ import annotations

from workspace_size.app.cli import cli
from workspace_size.app.monitor import ScanStatus, SizeMonitor
from workspace_size.app.runner import ApplicationRunner

__all__ = [
    "cli",
    "ApplicationRunner",
    "ScanStatus",
    "SizeMonitor",
]
