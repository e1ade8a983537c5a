"""In-memory document store, intended for development and tests."""

import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List

from uvguard.errors import StoreUnavailable
from uvguard.models import NewUVRecord, UVRecord
from uvguard.store.base import ChangeCallback, DocumentChange, DocumentStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="store/in_memory_document_store")


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe in-memory collection with synchronous change fan-out."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        logger.debug("Initializing InMemoryDocumentStore")
        self._records: Dict[str, UVRecord] = {}
        self._watchers: List[ChangeCallback] = []
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.network_enabled = True

    def _generate_id(self) -> str:
        return uuid.uuid4().hex

    def _check_network(self) -> None:
        if not self.network_enabled:
            raise StoreUnavailable("Document store network is disabled")

    def _sorted(self) -> List[UVRecord]:
        return sorted(self._records.values(), key=lambda r: r.timestamp, reverse=True)

    def _notify(self, changes: List[DocumentChange]) -> None:
        for callback in list(self._watchers):
            try:
                callback(changes)
            except Exception:
                logger.exception("Change callback failed")

    async def add_record(self, record: NewUVRecord) -> str:
        """Store a record, stamping id and server timestamp."""
        self._check_network()
        with self._lock:
            stored = UVRecord(**record.model_dump(), id=self._generate_id(), timestamp=self._clock())
            self._records[stored.id] = stored
        self._notify([DocumentChange("added", stored)])
        return stored.id

    async def list_records(self) -> List[UVRecord]:
        self._check_network()
        with self._lock:
            return self._sorted()

    def watch(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register a live query and deliver the current snapshot."""
        with self._lock:
            self._watchers.append(callback)
            snapshot = [DocumentChange("added", r) for r in self._sorted()]
        if snapshot:
            callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._watchers:
                    self._watchers.remove(callback)

        return unsubscribe

    async def enable_network(self) -> None:
        if not self.network_enabled:
            logger.info("Document store network enabled")
        self.network_enabled = True

    async def disable_network(self) -> None:
        if self.network_enabled:
            logger.info("Document store network disabled")
        self.network_enabled = False

    def clear(self) -> None:
        """Remove all records (dev/testing), notifying watchers."""
        with self._lock:
            removed = [DocumentChange("removed", r) for r in self._records.values()]
            self._records.clear()
        if removed:
            self._notify(removed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
