"""Debounced live view over the stored UV records."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from uvguard.models import UVRecord
from uvguard.store.base import DocumentChange, DocumentStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="history")

FLUSH_DELAY_SECONDS = 1.0

HistoryListener = Callable[[List[UVRecord]], None]


def _sort_key(record: UVRecord) -> datetime:
    # records whose server timestamp has not landed yet sort as "now"
    return record.timestamp or datetime.now(timezone.utc)


class HistoryFeed:
    """Newest-first list of records, refreshed at most once per flush delay.

    Change batches from the store are buffered by record id (latest wins).
    Every batch restarts the flush timer, so a burst of updates produces a
    single flush `flush_delay` seconds after the last batch.

    On flush, `added` and `modified` changes replace a record in place (or
    append it, for `added`). A `removed` change drops the record from the
    list instead of replacing it. Modifications to unknown ids are ignored.

    Use as an async context manager, or call `start()` and `close()`.
    """

    def __init__(self, store: DocumentStore, flush_delay: float = FLUSH_DELAY_SECONDS) -> None:
        self.store = store
        self.flush_delay = flush_delay
        self._records: List[UVRecord] = []
        self._buffer: Dict[str, DocumentChange] = {}
        self._timer: Optional[asyncio.TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._listeners: List[HistoryListener] = []
        self._closed = False
        self.flush_count = 0

    @property
    def records(self) -> List[UVRecord]:
        return list(self._records)

    def start(self) -> "HistoryFeed":
        """Attach the live query. Must be called from the running loop."""
        if self._unsubscribe is not None:
            return self
        self._loop = asyncio.get_running_loop()
        self._closed = False
        self._unsubscribe = self.store.watch(self._on_changes)
        return self

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """Call `listener` with the new list after every flush."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_changes(self, changes: List[DocumentChange]) -> None:
        # store callbacks may run on a worker thread (Redis pub/sub)
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._buffer_changes(changes)
        else:
            loop.call_soon_threadsafe(self._buffer_changes, changes)

    def _buffer_changes(self, changes: List[DocumentChange]) -> None:
        if self._closed:
            return
        for change in changes:
            self._buffer[change.record.id] = change
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self.flush_delay, self.flush)

    def flush(self) -> None:
        """Apply buffered changes to the visible list."""
        self._timer = None
        if not self._buffer:
            return
        changes = list(self._buffer.values())
        self._buffer.clear()

        records = list(self._records)
        index = {r.id: i for i, r in enumerate(records)}
        removed = set()
        for change in changes:
            rid = change.record.id
            if change.type == "removed":
                removed.add(rid)
            elif rid in index:
                records[index[rid]] = change.record
            elif change.type == "added":
                index[rid] = len(records)
                records.append(change.record)
        if removed:
            records = [r for r in records if r.id not in removed]
        records.sort(key=_sort_key, reverse=True)

        self._records = records
        self.flush_count += 1
        logger.debug("History flushed", extra={"changes": len(changes), "records": len(records)})
        for listener in list(self._listeners):
            try:
                listener(self.records)
            except Exception:
                logger.exception("History listener failed")

    def close(self) -> None:
        """Cancel any pending flush and detach the live query."""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._buffer.clear()
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    async def __aenter__(self) -> "HistoryFeed":
        return self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
