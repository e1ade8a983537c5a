"""Document store backends for persisted UV records."""

from .base import ChangeCallback, DocumentChange, DocumentStore
from .factory import build_document_store
from .memory import InMemoryDocumentStore
from .redis import RedisDocumentStore

__all__ = [
    "ChangeCallback",
    "DocumentChange",
    "DocumentStore",
    "InMemoryDocumentStore",
    "RedisDocumentStore",
    "build_document_store",
]
