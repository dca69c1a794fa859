"""Shared number, size and timestamp formatting.

Both comparers round percentages and render byte counts the same way, so
the helpers live here rather than in either of them.
"""

from __future__ import annotations

from datetime import UTC, datetime

_BYTE_UNITS = ("B", "KB", "MB", "GB")

# Severity ordering used when sorting anomalies (higher sorts first)
COMPARE_SEVERITY_RANK = {"high": 3, "medium": 2, "low": 1}
DIFF_SEVERITY_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}


def format_bytes(num_bytes: int | float) -> str:
    """Render a byte count with a binary unit, keeping at most 2 decimals.

    Examples:
        0 -> "0 B"
        1536 -> "1.5 KB"
        -2048 -> "-2 KB"
        1048576 -> "1 MB"
    """
    if num_bytes == 0:
        return "0 B"

    value = float(num_bytes)
    unit = 0
    while abs(value) >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1

    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[unit]}"


def round_pct(value: float) -> float:
    """Round a percentage to 2 decimals for output."""
    return round(value, 2)


def pct_change(base: int, new: int) -> float:
    """Unrounded percent change from base to new.

    A zero baseline reports 100 when something appeared and 0 when both
    sides are empty.
    """
    delta = new - base
    if base > 0:
        return delta / base * 100
    return 100.0 if new > 0 else 0.0


def total_pct_change(base: int, new: int) -> float:
    """Rounded percent change for summary totals; 0 when the baseline is 0."""
    if base > 0:
        return round_pct((new - base) / base * 100)
    return 0.0


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Args:
        count: The number of items
        singular: Singular form (e.g., "section")
        plural: Plural form (default: singular + "s")

    Returns:
        Formatted string like "1 section" or "3 sections"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples:
        0.345 -> "0.3s"
        90.0 -> "1m 30s"
        86400.0 -> "24h 0m"
    """
    if seconds < 0:
        raise ValueError("Duration must be non-negative")

    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes = int(seconds // 60)
    remaining_secs = int(seconds % 60)

    if minutes < 60:
        return f"{minutes}m {remaining_secs}s"

    hours = minutes // 60
    return f"{hours}h {minutes % 60}m"
