"""Shared utility modules for common operations.

This package provides:
- Byte size formatting (bytes to human-readable)
- Logging configuration with scan ID tracking
"""

from workspace_size.utils.formatting import format_bytes

__all__ = [
    "format_bytes",
]
