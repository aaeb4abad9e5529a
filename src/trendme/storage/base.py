"""Persistence interfaces: document store and blob store.

Documents are plain JSON-compatible dicts addressed by a slash separated
collection path (``users/{uid}/posts``) and a document id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal

# (field, operator, value)
WhereClause = tuple[str, str, Any]

# Receives the full matching snapshot after every change
SnapshotCallback = Callable[[list[dict[str, Any]]], Awaitable[None]]

Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class WriteOp:
    """One operation of a batch write."""

    kind: Literal["set", "delete"]
    collection: str
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)
    merge: bool = False


def _compare(actual: Any, op: str, expected: Any) -> bool:
    if op == "==":
        return actual == expected
    if op == "!=":
        return actual != expected
    if op == "in":
        return actual in expected
    if op == "array_contains":
        return isinstance(actual, list) and expected in actual
    if actual is None:
        return False
    if op == "<":
        return actual < expected
    if op == "<=":
        return actual <= expected
    if op == ">":
        return actual > expected
    if op == ">=":
        return actual >= expected
    raise ValueError(f"Unsupported where operator: {op}")


def matches(document: dict[str, Any], where: list[WhereClause] | None) -> bool:
    """Check a document against every where clause."""
    return all(_compare(document.get(name), op, value) for name, op, value in where or [])


def fields_match(document: dict[str, Any] | None, expected: dict[str, Any] | None) -> bool:
    """Compare-and-set precondition.

    ``expected is None`` requires the document to be absent; otherwise every
    expected field must equal the stored one.
    """
    if expected is None:
        return document is None
    if document is None:
        return False
    return all(document.get(key) == value for key, value in expected.items())


class DocumentStore(ABC):
    """Document-style persistence service."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        """Create or replace (or merge into) a document."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Read one document."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete one document. Missing documents are ignored."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        where: list[WhereClause] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Read documents matching every clause, optionally ordered and limited."""

    @abstractmethod
    async def batch_write(self, operations: list[WriteOp]) -> None:
        """Apply several writes together."""

    @abstractmethod
    async def subscribe(
        self,
        collection: str,
        callback: SnapshotCallback,
        where: list[WhereClause] | None = None,
    ) -> Unsubscribe:
        """Deliver the current snapshot, then a new one after every change."""

    @abstractmethod
    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        expected: dict[str, Any] | None,
        data: dict[str, Any],
    ) -> bool:
        """Atomically replace a document if it still matches ``expected``.

        Returns:
            True when the write happened.
        """


class BlobStore(ABC):
    """Binary object storage returning stable URLs."""

    @abstractmethod
    async def upload(self, data: bytes, path: str, content_type: str = "image/png") -> str:
        """Store ``data`` at ``path`` and return its URL."""
