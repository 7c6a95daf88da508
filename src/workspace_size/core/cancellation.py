"""Cooperative cancellation for size scans.

A scan's initiator owns a CancellationTokenSource and hands its token to
every component spawned for that scan. Components poll the token at loop
boundaries and before starting new I/O; nothing is interrupted forcibly.
"""

from __future__ import annotations

import logging
from typing import Final

__all__ = ["CancellationToken", "CancellationTokenSource"]

logger = logging.getLogger(__name__)


class CancellationToken:
    """Read-only, shared view of a scan's cancellation state.

    Tokens are passed by reference; copying one would detach it from its
    source.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled: bool = False

    @property
    def is_cancellation_requested(self) -> bool:
        """Whether the owning source has been cancelled."""
        return self._cancelled

    def _cancel(self) -> bool:
        if self._cancelled:
            return False
        self._cancelled = True
        return True

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


class CancellationTokenSource:
    """Owner of a cancellation token for one scan.

    ``cancel()`` is idempotent and the transition is one-way. ``dispose()``
    marks the source as finished; it does not cancel the token, and a
    disposed source can still be queried and cancelled.
    """

    __slots__ = ("_disposed", "_token")

    def __init__(self) -> None:
        self._token: Final[CancellationToken] = CancellationToken()
        self._disposed: bool = False

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def is_cancellation_requested(self) -> bool:
        return self._token.is_cancellation_requested

    @property
    def disposed(self) -> bool:
        return self._disposed

    def cancel(self) -> None:
        """Request cancellation of every operation holding this source's token."""
        if self._token._cancel():  # pyright: ignore[reportPrivateUsage]
            logger.debug("Cancellation requested")

    def dispose(self) -> None:
        self._disposed = True

    def __enter__(self) -> CancellationTokenSource:
        return self

    def __exit__(self, *_: object) -> None:
        self.dispose()
