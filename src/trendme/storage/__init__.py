"""Persistence: document store, blob store and owner-scoped repositories."""

from .base import BlobStore, DocumentStore, WriteOp
from .blob import CloudinaryBlobStore, LocalBlobStore, create_blob_store
from .json_store import JsonDocumentStore
from .repositories import InfluencerRepository, PostRepository

__all__ = [
    "BlobStore",
    "DocumentStore",
    "WriteOp",
    "CloudinaryBlobStore",
    "LocalBlobStore",
    "create_blob_store",
    "JsonDocumentStore",
    "InfluencerRepository",
    "PostRepository",
]
