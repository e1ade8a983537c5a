"""In-memory UV response cache keyed by quantized coordinates."""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from uvguard.models import UVResponse
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="request_cache")

CACHE_DURATION_SECONDS = 5 * 60
KEY_PRECISION = 4


def cache_key(latitude: float, longitude: float) -> str:
    """Round both components to 4 decimals (~11 m) and join them."""
    return f"{latitude:.{KEY_PRECISION}f},{longitude:.{KEY_PRECISION}f}"


@dataclass
class CacheEntry:
    """Cached payload with the monotonic time it was stored."""
    key: str
    payload: UVResponse
    stored_at: float


class RequestCache:
    """TTL-aware cache of UV responses.

    Stale entries are not evicted on read; the next `put` for the same key
    overwrites them. With `max_entries` unset the map grows without bound.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_DURATION_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def _fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at < self.ttl

    def get(self, latitude: float, longitude: float) -> Optional[UVResponse]:
        """Return the cached payload if it is still fresh, else None."""
        key = cache_key(latitude, longitude)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._fresh(entry):
                logger.debug("Cache entry stale", extra={"key": key})
                return None
            return entry.payload

    def put(self, latitude: float, longitude: float, payload: UVResponse) -> None:
        """Store (or overwrite) the payload for the coordinate's key."""
        key = cache_key(latitude, longitude)
        with self._lock:
            # re-insert so insertion order tracks stored_at for eviction
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, payload=payload, stored_at=self._clock())
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted cache entry", extra={"key": evicted})

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
