"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from tests.fixtures.memory_filesystem import MemoryFileSystem
from workspace_size.core.cancellation import CancellationTokenSource


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """Provide an empty in-memory filesystem."""
    return MemoryFileSystem()


@pytest.fixture
def token_source() -> Generator[CancellationTokenSource, None, None]:
    """Provide a fresh cancellation source, disposed after the test."""
    with CancellationTokenSource() as source:
        yield source

