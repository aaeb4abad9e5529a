"""Timestamp utilities.

Every persisted timestamp is an integer count of milliseconds since the Unix
epoch (UTC). Datetimes are only built for display.

Usage:
    from trendme.utils.timestamps import now_ms, age_ms, format_age

    saved_at = now_ms()
    if age_ms(saved_at) > 3_600_000:
        ...
    print(format_age(saved_at))  # "12m ago"
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def age_ms(timestamp_ms: int, now: int | None = None) -> int:
    """Milliseconds elapsed since ``timestamp_ms``."""
    return (now if now is not None else now_ms()) - timestamp_ms


def from_ms(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def format_age(timestamp_ms: int, now: int | None = None) -> str:
    """Format the age of a timestamp for display.

    Args:
        timestamp_ms: Epoch milliseconds.
        now: Reference time, defaults to the current time.

    Returns:
        Short relative string such as "just now", "12m ago", "3h ago", "2d ago".
    """
    seconds = max(0, age_ms(timestamp_ms, now) // 1000)
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
