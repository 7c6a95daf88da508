"""Exceptions raised by the size calculation core."""

from __future__ import annotations


class ScanError(Exception):
    """Raised when a scan fails fatally.

    Per-entry listing and stat failures are absorbed during traversal and
    never reach this exception. Anything else escaping a root's traversal
    aborts the whole ``calculate`` call; the original exception group is
    available as ``__cause__``.
    """

    failed_roots: tuple[str, ...]

    def __init__(self, message: str, *, failed_roots: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.failed_roots = failed_roots
