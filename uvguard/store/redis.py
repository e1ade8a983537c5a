"""Redis-backed document store with pub/sub change notifications."""

import asyncio
import json
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

import redis

from uvguard.errors import StoreUnavailable, TransportFailure
from uvguard.models import NewUVRecord, UVRecord
from uvguard.store.base import ChangeCallback, DocumentChange, DocumentStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="store/redis_document_store")


class RedisDocumentStore(DocumentStore):
    """UV records stored as JSON strings plus a timestamp-scored timeline.

    Keys (with the default prefix ``uvExposure:``):

    - ``uvExposure:record:<id>``  JSON document
    - ``uvExposure:timeline``     sorted set of ids scored by epoch seconds
    - ``uvExposure:changes``      pub/sub channel carrying change events
    """

    def __init__(self, client, prefix: str = "uvExposure:", poll_interval: float = 0.1) -> None:
        logger.debug("Initializing RedisDocumentStore")
        self.client = client
        self.prefix = prefix
        self.poll_interval = poll_interval
        self.network_enabled = True

    @classmethod
    def from_url(cls, url: str, prefix: str = "uvExposure:") -> "RedisDocumentStore":
        """Create a store from a redis:// URL."""
        return cls(redis.Redis.from_url(url), prefix=prefix)

    def _record_key(self, record_id: str) -> str:
        return f"{self.prefix}record:{record_id}"

    @property
    def _timeline_key(self) -> str:
        return f"{self.prefix}timeline"

    @property
    def channel(self) -> str:
        return f"{self.prefix}changes"

    def _generate_id(self) -> str:
        return uuid.uuid4().hex

    def _check_network(self) -> None:
        if not self.network_enabled:
            raise StoreUnavailable("Document store network is disabled")

    @staticmethod
    def _translate(exc: redis.RedisError) -> Exception:
        """Map redis-py errors onto the package's failure classes."""
        if isinstance(exc, (redis.ConnectionError, redis.TimeoutError)):
            return StoreUnavailable(f"Redis unreachable: {exc}")
        return TransportFailure(f"Redis error: {exc}")

    @staticmethod
    def _load(raw) -> Optional[UVRecord]:
        if not raw:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return UVRecord.model_validate_json(raw)
        except ValueError as exc:
            logger.error("Failed to deserialize UV record: %s", exc)
            return None

    def _write(self, record: NewUVRecord) -> str:
        stored = UVRecord(
            **record.model_dump(),
            id=self._generate_id(),
            timestamp=datetime.now(timezone.utc),
        )
        payload = stored.model_dump_json()
        event = json.dumps({"type": "added", "record": json.loads(payload)})
        # MULTI/EXEC: a failed attempt leaves nothing behind for the retry to duplicate
        pipe = self.client.pipeline(transaction=True)
        pipe.set(self._record_key(stored.id), payload)
        pipe.zadd(self._timeline_key, {stored.id: stored.timestamp.timestamp()})
        pipe.publish(self.channel, event)
        pipe.execute()
        return stored.id

    def _read_all(self) -> List[UVRecord]:
        ids = self.client.zrevrange(self._timeline_key, 0, -1)
        if not ids:
            return []
        keys = [self._record_key(i.decode("utf-8") if isinstance(i, bytes) else i) for i in ids]
        records = [self._load(raw) for raw in self.client.mget(keys)]
        return [r for r in records if r is not None]

    async def add_record(self, record: NewUVRecord) -> str:
        """Persist a record and publish an `added` change."""
        self._check_network()
        try:
            return await asyncio.to_thread(self._write, record)
        except redis.RedisError as exc:
            raise self._translate(exc) from exc

    async def list_records(self) -> List[UVRecord]:
        """Return all records, newest first."""
        self._check_network()
        try:
            return await asyncio.to_thread(self._read_all)
        except redis.RedisError as exc:
            raise self._translate(exc) from exc

    def _decode_event(self, message: dict) -> Optional[DocumentChange]:
        data = message.get("data")
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            event = json.loads(data)
            return DocumentChange(event["type"], UVRecord.model_validate(event["record"]))
        except (TypeError, KeyError, ValueError) as exc:
            logger.warning("Ignoring malformed change event", extra={"error": str(exc)})
            return None

    def watch(self, callback: ChangeCallback) -> Callable[[], None]:
        """Subscribe to the change channel; handlers run on a redis-py worker thread."""
        def handler(message: dict) -> None:
            change = self._decode_event(message)
            if change is not None:
                callback([change])

        try:
            pubsub = self.client.pubsub(ignore_subscribe_messages=True)
            pubsub.subscribe(**{self.channel: handler})
            snapshot = [DocumentChange("added", r) for r in self._read_all()]
        except redis.RedisError as exc:
            raise self._translate(exc) from exc
        if snapshot:
            callback(snapshot)
        worker = pubsub.run_in_thread(sleep_time=self.poll_interval, daemon=True)

        def unsubscribe() -> None:
            worker.stop()
            try:
                pubsub.close()
            except redis.RedisError as exc:
                logger.warning("Failed to close Redis pub/sub: %s", exc)

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
        """Best-effort removal of every key under the prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except redis.RedisError as exc:
            logger.error("Failed to clear records from Redis: %s", exc)
