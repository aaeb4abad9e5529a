"""Tolerant JSON extraction for semi-structured model output.

Models asked for JSON sometimes wrap it in prose or a fenced code block.
Extraction runs an ordered list of strategies and stops at the first one
that yields valid JSON of the expected shape.

Usage:
    result = parse_json(response.text, expect=dict)
    if isinstance(result, ParseFailure):
        raise ParsingError("persona", detail=result.reason)
    data = result.value
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from .errors import ParsingError

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class ParseSuccess:
    """Parsed value and the strategy that produced it."""

    value: Any
    strategy: str


@dataclass(frozen=True)
class ParseFailure:
    """No strategy produced a usable value."""

    reason: str
    attempted: list[str] = field(default_factory=list)


ParseResult = ParseSuccess | ParseFailure


def _direct(text: str) -> str | None:
    return text.strip() or None


def _fenced_block(text: str) -> str | None:
    match = _FENCED_BLOCK.search(text)
    return match.group(1).strip() if match else None


def _bracket_scan(text: str) -> str | None:
    """Slice from the first opening bracket to its last matching closer."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    return text[start:end + 1]


STRATEGIES: list[tuple[str, Callable[[str], str | None]]] = [
    ("direct", _direct),
    ("fenced_block", _fenced_block),
    ("bracket_scan", _bracket_scan),
]


def parse_json(text: str | None, expect: type | tuple[type, ...] = (dict, list)) -> ParseResult:
    """Extract a JSON value from model output.

    Args:
        text: Raw response text.
        expect: Accepted top-level type(s) of the parsed value.

    Returns:
        ParseSuccess with the first value of the expected type, else ParseFailure.
    """
    if not text:
        return ParseFailure("empty response")

    attempted: list[str] = []
    last_reason = "no candidate found"
    for name, extract in STRATEGIES:
        candidate = extract(text)
        if candidate is None:
            continue
        attempted.append(name)
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_reason = f"{name}: {e.msg}"
            continue
        if not isinstance(value, expect):
            last_reason = f"{name}: unexpected {type(value).__name__}"
            continue
        return ParseSuccess(value, name)

    return ParseFailure(last_reason, attempted)


# =============================================================================
# Field coercion helpers for parsed model output
# =============================================================================

def as_text(value: Any) -> str:
    """Stripped string, or "" for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ""


def as_strings(value: Any) -> list[str]:
    """Non-empty strings of a list, or [] for anything that is not a list."""
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def as_score(value: Any, default: int) -> int:
    """Positive integer score, or ``default``."""
    try:
        score = int(value)
    except (TypeError, ValueError):
        return default
    return score if score > 0 else default


def as_records(value: Any) -> list[dict[str, Any]]:
    """Dict items of a list; a lone dict becomes a one-item list."""
    items = value if isinstance(value, list) else [value]
    return [item for item in items if isinstance(item, dict)]


def require_json(text: str | None, expect: type | tuple[type, ...], operation: str) -> Any:
    """Parse or raise a non-retryable ParsingError."""
    result = parse_json(text, expect=expect)
    if isinstance(result, ParseFailure):
        raise ParsingError(operation, detail=result.reason)
    return result.value
