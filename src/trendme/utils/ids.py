"""Identifier helpers."""

from __future__ import annotations

import uuid


def generate_id(prefix: str = "") -> str:
    """Return a random identifier, optionally prefixed (``post_3f2a...``)."""
    value = uuid.uuid4().hex[:16]
    return f"{prefix}_{value}" if prefix else value
