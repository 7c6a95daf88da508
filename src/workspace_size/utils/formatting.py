"""Pure formatting utilities for human-readable output.

This module provides stateless formatting functions for converting raw byte
counts into human-readable strings. All functions are pure with no side
effects and never raise.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

# Binary units (1024-based), bytes through petabytes
_UNITS: Final[tuple[str, ...]] = ("B", "KB", "MB", "GB", "TB", "PB")
_STEP: Final[float] = 1024.0

# Values at or above this render without a fractional digit
_WHOLE_NUMBER_THRESHOLD: Final[float] = 100.0

_ZERO: Final[str] = "0 B"
_ONE_DECIMAL: Final[Decimal] = Decimal("0.1")


def _round_half_up(value: float) -> str:
    # Rounds the exact binary value, so 1.25 becomes "1.3" rather than
    # the round-half-even "1.2".
    return str(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def format_bytes(size: float) -> str:
    """Convert a byte count to a human-readable magnitude string.

    Uses binary units (1024-based) from bytes up through petabytes. Values in
    the base unit, or at or above 100 in the chosen unit, render with no
    fractional digit; everything else renders with one fractional digit,
    dropping a trailing ".0".

    Args:
        size: Number of bytes; negative or non-finite input renders as zero

    Returns:
        Human-readable size such as "512 B", "1.5 KB" or "120 MB"

    Examples:
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(1023)
        '1023 B'
        >>> format_bytes(1024)
        '1 KB'
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(1048576)
        '1 MB'
        >>> format_bytes(-5)
        '0 B'
    """
    try:
        value = float(size)
    except OverflowError:
        return _ZERO
    if not math.isfinite(value) or value < 0:
        return _ZERO

    unit_index = 0
    while value >= _STEP and unit_index < len(_UNITS) - 1:
        value /= _STEP
        unit_index += 1

    if value >= _WHOLE_NUMBER_THRESHOLD or unit_index == 0:
        # value + 0.5 is exact here: either value >= 100 or it is a whole
        # number of bytes.
        formatted = str(math.floor(value + 0.5))
    else:
        formatted = _round_half_up(value)
        if formatted.endswith(".0"):
            formatted = formatted[:-2]

    return f"{formatted} {_UNITS[unit_index]}"
