"""Logging infrastructure with scan ID tracking.

This module configures application logging for workspace-size and tracks a
scan ID in a ContextVar so that every log record emitted while a scan runs,
including records from the per-root tasks it spawns, carries the same ID.
"""

import contextvars
import logging
import sys
from collections.abc import Mapping
from typing import Final, TextIO, override

# Scan ID context variable; inherited by asyncio tasks created within the scan
scan_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scan_id",
    default=None,
)

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(scan_id)s] - %(message)s"

VALID_LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ScanIDFilter(logging.Filter):
    """Logging filter that adds the current scan ID to log records.

    Records emitted outside of a scan get "N/A".
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        scan_id = scan_id_var.get()
        record.scan_id = scan_id if scan_id is not None else "N/A"
        return True


def configure_logging(
    *,
    log_level: str = "WARNING",
    stream: TextIO | None = None,
) -> None:
    """Configure application logging.

    Replaces any handlers on the root logger with a single stream handler
    that stamps records with the current scan ID.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream (defaults to stderr so stdout stays clean for results)

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> logger = get_logger(__name__)
        >>> logger.debug("Scan scheduled")
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    handler.addFilter(ScanIDFilter())

    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def set_scan_id(scan_id: str) -> contextvars.Token[str | None]:
    """Set the scan ID for the current context.

    Args:
        scan_id: Unique identifier for the scan (e.g., a UUID hex string)

    Returns:
        Token that restores the previous value when passed to ``reset_scan_id``
    """
    return scan_id_var.set(scan_id)


def reset_scan_id(token: contextvars.Token[str | None]) -> None:
    """Restore the scan ID that was current before ``set_scan_id``."""
    scan_id_var.reset(token)


def get_scan_id() -> str | None:
    """Get the current scan ID from context.

    Returns:
        Current scan ID or None outside of a scan
    """
    return scan_id_var.get()


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    extra: Mapping[str, object] | None = None,
) -> None:
    """Log a message with additional context fields.

    Args:
        logger: Logger instance to use
        level: Logging level (e.g., logging.INFO)
        message: Log message
        extra: Additional context fields to include in the record

    Example:
        >>> log_with_context(
        ...     get_logger(__name__),
        ...     logging.INFO,
        ...     "Scan complete",
        ...     extra={"root_count": 2, "total_bytes": 800},
        ... )
    """
    context = dict(extra) if extra else {}
    logger.log(level, message, extra=context)
