"""JSON file document store.

Each collection is one JSON file mirroring its path under the data dir:

    data/
        users/u1/influencers.json
        users/u1/posts.json
        news/sustainable-fashion/articles.json
        news_metadata.json

Writes go to a temporary file that replaces the original. Every
read-modify-write holds the store's asyncio lock and a ``filelock`` lock on
``<collection>.json.lock``, so ``compare_and_set`` is atomic across tasks and
across processes sharing the data dir.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any, Iterator

from filelock import FileLock

from .base import (
    DocumentStore,
    SnapshotCallback,
    Unsubscribe,
    WhereClause,
    WriteOp,
    fields_match,
    matches,
)

_logger = logging.getLogger("storage")


class JsonDocumentStore(DocumentStore):
    """DocumentStore persisted as one JSON file per collection."""

    def __init__(self, data_dir: Path, lock_timeout: float = 10.0):
        """Initialize the store.

        Args:
            data_dir: Root directory for collection files.
            lock_timeout: Seconds to wait for another process's file lock.
        """
        self.data_dir = Path(data_dir)
        self.lock_timeout = lock_timeout
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        self._subscribers: dict[str, list[tuple[list[WhereClause] | None, SnapshotCallback]]] = {}

    def _collection_file(self, collection: str) -> Path:
        parts = [part for part in collection.strip("/").split("/") if part]
        if not parts or any(part in (".", "..") for part in parts):
            raise ValueError(f"Invalid collection path: {collection!r}")
        return self.data_dir.joinpath(*parts[:-1]) / f"{parts[-1]}.json"

    def _lock_file(self, collection: str) -> Path:
        return self._collection_file(collection).with_suffix(".json.lock")

    @contextmanager
    def _locked(self, collections: list[str]) -> Iterator[None]:
        """Hold the cross-process lock of each collection, in sorted order."""
        with ExitStack() as stack:
            for collection in sorted(set(collections)):
                lock_file = self._lock_file(collection)
                lock_file.parent.mkdir(parents=True, exist_ok=True)
                stack.enter_context(FileLock(str(lock_file), timeout=self.lock_timeout))
            yield

    def _read(self, collection: str) -> dict[str, dict[str, Any]]:
        path = self._collection_file(collection)
        if not path.exists():
            return {}
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _write(self, collection: str, documents: dict[str, dict[str, Any]]) -> None:
        path = self._collection_file(collection)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(documents, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)

    @staticmethod
    def _apply_set(
        documents: dict[str, dict[str, Any]],
        doc_id: str,
        data: dict[str, Any],
        merge: bool,
    ) -> None:
        if merge and doc_id in documents:
            documents[doc_id] = {**documents[doc_id], **data}
        else:
            documents[doc_id] = dict(data)

    async def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        async with self._lock:
            with self._locked([collection]):
                documents = self._read(collection)
                self._apply_set(documents, doc_id, data, merge)
                self._write(collection, documents)
        _logger.debug(f"SET | {collection}/{doc_id} | merge:{merge}")
        await self._notify([collection])

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        async with self._lock:
            document = self._read(collection).get(doc_id)
        return dict(document) if document is not None else None

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._lock:
            with self._locked([collection]):
                documents = self._read(collection)
                if documents.pop(doc_id, None) is None:
                    return
                self._write(collection, documents)
        _logger.debug(f"DELETE | {collection}/{doc_id}")
        await self._notify([collection])

    async def query(
        self,
        collection: str,
        where: list[WhereClause] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        async with self._lock:
            documents = list(self._read(collection).values())
        return self._select(documents, where, order_by, descending, limit)

    @staticmethod
    def _select(
        documents: list[dict[str, Any]],
        where: list[WhereClause] | None,
        order_by: str | None,
        descending: bool,
        limit: int | None,
    ) -> list[dict[str, Any]]:
        selected = [doc for doc in documents if matches(doc, where)]
        if order_by:
            # Documents missing the field sort last
            present = [doc for doc in selected if doc.get(order_by) is not None]
            missing = [doc for doc in selected if doc.get(order_by) is None]
            present.sort(key=lambda doc: doc[order_by], reverse=descending)
            selected = present + missing
        if limit is not None:
            selected = selected[:limit]
        return selected

    async def batch_write(self, operations: list[WriteOp]) -> None:
        if not operations:
            return
        async with self._lock:
            with self._locked([op.collection for op in operations]):
                touched: dict[str, dict[str, dict[str, Any]]] = {}
                for op in operations:
                    if op.collection not in touched:
                        touched[op.collection] = self._read(op.collection)
                    documents = touched[op.collection]
                    if op.kind == "set":
                        self._apply_set(documents, op.doc_id, op.data, op.merge)
                    else:
                        documents.pop(op.doc_id, None)
                for collection, documents in touched.items():
                    self._write(collection, documents)
        _logger.debug(f"BATCH | ops:{len(operations)} | collections:{len(touched)}")
        await self._notify(list(touched))

    async def subscribe(
        self,
        collection: str,
        callback: SnapshotCallback,
        where: list[WhereClause] | None = None,
    ) -> Unsubscribe:
        entry = (where, callback)
        self._subscribers.setdefault(collection, []).append(entry)
        await callback(await self.query(collection, where))

        def unsubscribe() -> None:
            listeners = self._subscribers.get(collection, [])
            if entry in listeners:
                listeners.remove(entry)

        return unsubscribe

    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        expected: dict[str, Any] | None,
        data: dict[str, Any],
    ) -> bool:
        async with self._lock:
            with self._locked([collection]):
                documents = self._read(collection)
                if not fields_match(documents.get(doc_id), expected):
                    _logger.debug(f"CAS_REJECTED | {collection}/{doc_id}")
                    return False
                documents[doc_id] = dict(data)
                self._write(collection, documents)
        _logger.debug(f"CAS_OK | {collection}/{doc_id}")
        await self._notify([collection])
        return True

    async def _notify(self, collections: list[str]) -> None:
        for collection in collections:
            listeners = list(self._subscribers.get(collection, []))
            if not listeners:
                continue
            snapshot = await self.query(collection)
            for where, callback in listeners:
                await callback([doc for doc in snapshot if matches(doc, where)])
