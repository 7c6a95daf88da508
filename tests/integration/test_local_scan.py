"""Integration tests scanning real directory trees on the local disk."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from workspace_size import (
    CancellationTokenSource,
    LocalFileSystem,
    Root,
    WorkspaceSizeCalculator,
    format_bytes,
)

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]

symlinks = pytest.mark.skipif(os.name == "nt", reason="requires POSIX symlinks")


def _write(path: Path, size: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_bytes(b"\0" * size)


async def test_two_root_workspace(tmp_path: Path) -> None:
    empty = tmp_path / "a"
    empty.mkdir()
    project = tmp_path / "b"
    _write(project / "f", 500)
    _write(project / "sub" / "g", 300)

    with CancellationTokenSource() as source:
        results = await WorkspaceSizeCalculator(LocalFileSystem()).calculate(
            [Root.from_path(empty), Root.from_path(project)], source.token
        )

    assert [(result.root.name, result.size) for result in results] == [("a", 0), ("b", 800)]


@symlinks
async def test_links_are_not_followed(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    _write(outside / "huge.bin", 10_000)
    project = tmp_path / "project"
    _write(project / "src" / "main.py", 120)
    (project / "link_to_outside").symlink_to(outside, target_is_directory=True)
    (project / "link_to_file").symlink_to(outside / "huge.bin")
    (project / "src" / "loop").symlink_to(project, target_is_directory=True)
    (project / "dangling").symlink_to(tmp_path / "missing")

    with CancellationTokenSource() as source:
        results = await WorkspaceSizeCalculator().calculate([Root.from_path(project)], source.token)

    assert results[0].size == 120


async def test_many_files_with_small_concurrency(tmp_path: Path) -> None:
    for index in range(200):
        _write(tmp_path / f"dir{index % 7}" / f"file{index}.dat", index)

    with CancellationTokenSource() as source:
        results = await WorkspaceSizeCalculator(stat_concurrency=3).calculate([Root.from_path(tmp_path)], source.token)

    assert results[0].size == sum(range(200))
    assert format_bytes(results[0].size) == "19.4 KB"


async def test_missing_root_is_zero(tmp_path: Path) -> None:
    with CancellationTokenSource() as source:
        results = await WorkspaceSizeCalculator().calculate([Root.from_path(tmp_path / "absent")], source.token)

    assert results[0].size == 0


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="requires POSIX permissions as a non-root user")
async def test_unreadable_directory_is_skipped(tmp_path: Path) -> None:
    _write(tmp_path / "visible.txt", 10)
    locked = tmp_path / "locked"
    _write(locked / "hidden.txt", 1000)
    locked.chmod(0o000)
    try:
        with CancellationTokenSource() as source:
            results = await WorkspaceSizeCalculator().calculate([Root.from_path(tmp_path)], source.token)
    finally:
        locked.chmod(0o755)

    assert results[0].size == 10
