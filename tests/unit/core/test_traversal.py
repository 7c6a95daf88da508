"""Unit tests for the per-root traversal engine.

Tests cover:
- Summing regular files across nested directories
- Entries the listing cannot classify, resolved by a stat
- Symbolic links, which are never followed or sized
- Listing and stat failures absorbed locally
- Type changes between listing and statting
- Cancellation before and during a traversal
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.fixtures.memory_filesystem import MemoryFileSystem
from workspace_size.core.cancellation import CancellationTokenSource
from workspace_size.core.stat_dispatcher import StatDispatcher
from workspace_size.core.traversal import TraversalEngine
from workspace_size.types import FileType

pytestmark = pytest.mark.asyncio


def _engine(fs: MemoryFileSystem, *, concurrency: int = 32) -> TraversalEngine:
    return TraversalEngine(fs, StatDispatcher(fs, concurrency=concurrency))


class TestSizing:
    """Test size accumulation over healthy trees."""

    async def test_empty_directory_is_zero(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/empty")

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 0
        assert memory_fs.statted == []

    async def test_nested_files_are_summed(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/b")
        _ = memory_fs.add_file("/b/f", 500)
        _ = memory_fs.add_dir("/b/sub")
        _ = memory_fs.add_file("/b/sub/g", 300)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 800

    async def test_directories_are_not_statted(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        sub = memory_fs.add_dir("/r/sub")
        _ = memory_fs.add_file("/r/sub/a", 10)

        _ = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert sub not in memory_fs.statted
        assert root not in memory_fs.statted
        assert set(memory_fs.listed) == {root, sub}

    async def test_deep_tree_does_not_recurse(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        """Depth well past the recursion limit is handled by the explicit frontier."""
        root = memory_fs.add_dir("/deep")
        current = root
        for _ in range(1500):
            current = memory_fs.add_dir(current / "d")
        _ = memory_fs.add_file(current / "leaf", 7)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 7

    async def test_many_files_respect_concurrency(self, token_source: CancellationTokenSource) -> None:
        fs = MemoryFileSystem(stat_delay=0.001)
        root = fs.add_dir("/many")
        for index in range(50):
            _ = fs.add_file(f"/many/f{index}", 2)

        size = await _engine(fs, concurrency=4).compute_folder_size(root, token_source.token)

        assert size == 100
        assert fs.peak_in_flight <= 4


class TestClassification:
    """Test how listing hints and stats combine."""

    async def test_unknown_entry_resolved_to_file(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        _ = memory_fs.add_file("/r/mystery", 42, hint=FileType.UNKNOWN)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 42

    async def test_unknown_entry_resolved_to_directory_is_descended(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        """A bind-mount-like entry resolved to a directory is traversed, not sized."""
        root = memory_fs.add_dir("/r")
        mount = memory_fs.add_dir("/r/mount", hint=FileType.UNKNOWN)
        _ = memory_fs.add_file("/r/mount/inner", 9)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 9
        assert mount in memory_fs.listed

    async def test_unknown_entry_resolved_to_link_is_ignored(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        _ = memory_fs.add_symlink("/r/odd", hint=FileType.UNKNOWN)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 0

    async def test_file_that_became_directory_contributes_nothing(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        _ = memory_fs.add_file("/r/swapped", 1000, actual=FileType.DIRECTORY)
        _ = memory_fs.add_file("/r/plain", 5)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 5
        assert Path("/r/swapped") not in memory_fs.listed

    @pytest.mark.parametrize(
        "hint",
        [FileType.SYMBOLIC_LINK, FileType.SYMBOLIC_LINK | FileType.DIRECTORY, FileType.SYMBOLIC_LINK | FileType.FILE],
    )
    async def test_symbolic_links_are_never_followed_or_statted(
        self,
        memory_fs: MemoryFileSystem,
        token_source: CancellationTokenSource,
        hint: FileType,
    ) -> None:
        root = memory_fs.add_dir("/r")
        link = memory_fs.add_symlink("/r/link", hint=hint)
        # Give the link a listing so following it would be observable
        memory_fs.listings[link] = []
        _ = memory_fs.add_file("/r/real", 11)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 11
        assert link not in memory_fs.statted
        assert link not in memory_fs.listed

    async def test_symlink_cycle_terminates(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/loop")
        _ = memory_fs.add_dir("/loop/child")
        _ = memory_fs.add_symlink("/loop/child/back", hint=FileType.SYMBOLIC_LINK | FileType.DIRECTORY)
        _ = memory_fs.add_file("/loop/child/data", 3)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 3

    async def test_duplicate_directory_is_listed_once(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        """A directory reachable twice in one traversal is only counted once."""
        root = memory_fs.add_dir("/r")
        sub = memory_fs.add_dir("/r/sub")
        _ = memory_fs.add_file("/r/sub/x", 20)
        memory_fs.listings[root].append(memory_fs.listings[root][0])

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 20
        assert memory_fs.listed.count(sub) == 1


class TestFailures:
    """Test local absorption of listing and stat failures."""

    async def test_failed_stat_contributes_zero(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        gone = memory_fs.add_file("/r/gone", 1_000)
        _ = memory_fs.add_file("/r/kept", 250)
        _ = memory_fs.add_file("/r/also_kept", 50)
        memory_fs.fail_stat(gone)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 300

    async def test_unreadable_subdirectory_is_skipped(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        locked = memory_fs.add_dir("/r/locked")
        _ = memory_fs.add_file("/r/locked/secret", 999)
        _ = memory_fs.add_file("/r/open", 1)
        memory_fs.fail_listing(locked)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 1

    @pytest.mark.parametrize("root", ["/missing", "/r/file"])
    async def test_missing_or_non_directory_root_is_zero(
        self,
        memory_fs: MemoryFileSystem,
        token_source: CancellationTokenSource,
        root: str,
    ) -> None:
        _ = memory_fs.add_dir("/r")
        _ = memory_fs.add_file("/r/file", 10)

        size = await _engine(memory_fs).compute_folder_size(Path(root), token_source.token)

        assert size == 0

    async def test_listing_entry_without_stat_contributes_zero(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        _ = memory_fs.add_listing_entry(root, "vanished", FileType.FILE)
        _ = memory_fs.add_file("/r/kept", 8)

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 8

    async def test_fatal_listing_error_propagates(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        memory_fs.fail_listing(root, ValueError("corrupt listing"))

        with pytest.raises(ValueError, match="corrupt listing"):
            _ = await _engine(memory_fs).compute_folder_size(root, token_source.token)


class TestCancellation:
    """Test cooperative cancellation of a traversal."""

    async def test_pre_cancelled_token_performs_no_io(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        _ = memory_fs.add_file("/r/a", 1)
        token_source.cancel()

        size = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert size == 0
        assert memory_fs.listed == []
        assert memory_fs.statted == []

    async def test_cancel_during_scan_stops_new_listings(
        self, memory_fs: MemoryFileSystem, token_source: CancellationTokenSource
    ) -> None:
        root = memory_fs.add_dir("/r")
        _ = memory_fs.add_file("/r/trigger", 1)
        for index in range(5):
            _ = memory_fs.add_dir(f"/r/d{index}")
            _ = memory_fs.add_file(f"/r/d{index}/f", 100)

        memory_fs.on_stat = lambda _location: token_source.cancel()

        _ = await _engine(memory_fs).compute_folder_size(root, token_source.token)

        assert memory_fs.listed == [root]
