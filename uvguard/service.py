"""Service facade wiring the cache, executor, client, queue and store together."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

import requests

from uvguard.config import Settings, settings as default_settings
from uvguard.connection import ConnectionListener, ConnectionState
from uvguard.history import HistoryFeed
from uvguard.models import GeoPoint, NewUVRecord, RecordMetadata, UVRecord, UVResponse
from uvguard.request_cache import RequestCache
from uvguard.resilience import ResilientExecutor
from uvguard.store import DocumentStore, build_document_store
from uvguard.uv_client import UVClient
from uvguard.write_queue import WriteQueue
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="service")


def write_key(data: UVResponse, now_ms: Optional[int] = None) -> str:
    """Key used to collapse duplicate saves of the same reading."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"uv-{data.lat}-{data.lng}-{now_ms}"


class UVService:
    """Everything the UI layer needs: lookups, saves, history and connectivity."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: DocumentStore | None = None,
        session: requests.Session | None = None,
        state: ConnectionState | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store if store is not None else build_document_store(self.settings)
        self.state = state or ConnectionState(max_retries=self.settings.max_retries)
        self.executor = ResilientExecutor(
            self.state,
            self.store,
            backoff_base_ms=self.settings.backoff_base_ms,
        )
        self.cache = RequestCache(
            ttl_seconds=self.settings.cache_duration_seconds,
            max_entries=self.settings.cache_max_entries,
        )
        self.client = UVClient.from_settings(self.settings, self.executor, self.cache, session=session)
        self.queue = WriteQueue(self.executor)

    async def get_uv_data(self, lat: Any, lng: Any) -> UVResponse:
        """UV data for a coordinate (cached for the configured window)."""
        return await self.client.get_uv_data(lat, lng)

    def _build_record(self, data: UVResponse) -> NewUVRecord:
        return NewUVRecord(
            uv_index=data.result.uv,
            risk_level=data.result.uv_max_risk,
            location=GeoPoint(latitude=data.lat, longitude=data.lng),
            metadata=RecordMetadata(
                status="synced" if self.state.is_online else "pending",
                retry_count=self.state.retry_attempts,
                created_at=datetime.now(timezone.utc).isoformat(),
            ),
        )

    async def save_uv_record(self, data: UVResponse, key: Optional[str] = None) -> Optional[str]:
        """Queue a write of `data`; returns the new record id, or None when degraded."""
        key = key or write_key(data)

        async def operation() -> str:
            return await self.store.add_record(self._build_record(data))

        record_id = await self.queue.add(operation, key)
        if record_id is None:
            logger.info("UV record not persisted (store unavailable)", extra={"key": key})
        else:
            logger.info("UV record saved", extra={"key": key, "record_id": record_id})
        return record_id

    async def list_history(self) -> List[UVRecord]:
        """One-shot read of stored records, newest first."""
        return await self.executor.run(self.store.list_records)

    def watch_history(self, flush_delay: Optional[float] = None) -> HistoryFeed:
        """Live, debounced history view; start it with `async with`."""
        delay = self.settings.history_flush_seconds if flush_delay is None else flush_delay
        return HistoryFeed(self.store, flush_delay=delay)

    def subscribe_connection(self, listener: ConnectionListener) -> Callable[[], None]:
        """Notify `listener` of online/offline changes."""
        return self.state.subscribe(listener)

    @property
    def is_online(self) -> bool:
        return self.state.is_online

    async def set_connectivity(self, online: bool) -> None:
        """External connectivity signal (e.g. the OS reports network up/down)."""
        self.state.set_online_status(online)
        if online:
            await self.store.enable_network()
        else:
            await self.store.disable_network()
