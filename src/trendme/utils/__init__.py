"""Utility modules for trendme."""

from .ids import generate_id
from .timestamps import age_ms, format_age, from_ms, now_ms

__all__ = [
    "generate_id",
    "age_ms",
    "format_age",
    "from_ms",
    "now_ms",
]
