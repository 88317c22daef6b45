"""Human-readable formatting for durations and file sizes."""
from typing import Optional, Union

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
_KILO = 1024


def format_duration(seconds: Optional[Union[int, float]]) -> str:
    """Format a duration as ``M:SS``.

    Minutes are not folded into hours, so ``3725`` becomes ``"62:05"``.
    Fractional seconds are dropped. ``None`` (live streams, or extractors
    that do not report a duration) formats as ``"0:00"``.

    Examples:
        >>> format_duration(213)
        '3:33'
        >>> format_duration(59.9)
        '0:59'
    """
    if seconds is None or seconds < 0:
        return "0:00"
    total = int(seconds)
    mins, secs = divmod(total, 60)
    return f"{mins}:{secs:02d}"


def format_bytes(size: int) -> str:
    """Format a byte count using 1024-based units, up to GB.

    The value is rounded to two decimals and trailing zeros are dropped.

    Examples:
        >>> format_bytes(0)
        '0 Bytes'
        >>> format_bytes(1536)
        '1.5 KB'
        >>> format_bytes(5 * 1024 * 1024)
        '5 MB'
    """
    if size <= 0:
        return "0 Bytes"

    index = 0
    while index < len(_SIZE_UNITS) - 1 and size >= _KILO ** (index + 1):
        index += 1

    value = f"{size / _KILO ** index:.2f}".rstrip("0").rstrip(".")
    return f"{value} {_SIZE_UNITS[index]}"
