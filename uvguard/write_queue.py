"""Single-flight, strictly sequential queue for document store writes."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional

from uvguard.errors import is_store_unavailable
from uvguard.resilience import ResilientExecutor
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="write_queue")

WriteOperation = Callable[[], Awaitable[Any]]


def _consume_exception(future: "asyncio.Future[Any]") -> None:
    # callers may have been cancelled and never await the shielded future
    if not future.cancelled():
        future.exception()


@dataclass
class QueuedWrite:
    """A write waiting for (or holding) the queue's single execution slot."""
    operation: WriteOperation
    key: str
    future: "asyncio.Future[Any]"


class WriteQueue:
    """Run writes one at a time through the executor, at most one per key.

    A key stays pending from `add` until its write settles. Further `add`
    calls for a pending key await the same future instead of enqueueing a
    second write. Writes that end in "store unavailable" resolve to None.
    """

    def __init__(self, executor: ResilientExecutor) -> None:
        self.executor = executor
        self._queue: Deque[QueuedWrite] = deque()
        self._pending: Dict[str, "asyncio.Future[Any]"] = {}
        self._drainer: Optional["asyncio.Task[None]"] = None

    @property
    def pending_keys(self) -> List[str]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._queue)

    async def add(self, operation: WriteOperation, key: str) -> Optional[Any]:
        """Enqueue `operation` under `key` and wait for its outcome."""
        existing = self._pending.get(key)
        if existing is not None:
            logger.debug("Write already pending; sharing outcome", extra={"key": key})
            return await asyncio.shield(existing)

        future = asyncio.get_running_loop().create_future()
        future.add_done_callback(_consume_exception)
        self._pending[key] = future
        self._queue.append(QueuedWrite(operation=operation, key=key, future=future))
        self._ensure_draining()
        return await asyncio.shield(future)

    def _ensure_draining(self) -> None:
        if self._drainer is None or self._drainer.done():
            self._drainer = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._queue:
            item = self._queue.popleft()
            try:
                result = await self.executor.run(item.operation)
            except asyncio.CancelledError:
                logger.warning("Write cancelled", extra={"key": item.key})
                item.future.cancel()
                if self._queue:
                    asyncio.get_running_loop().call_soon(self._ensure_draining)
                raise
            except Exception as exc:
                if is_store_unavailable(exc):
                    logger.warning("Store unavailable; write kept for offline sync", extra={"key": item.key})
                    self._settle(item, result=None)
                else:
                    logger.error("Write failed", extra={"key": item.key, "error": repr(exc)})
                    self._settle(item, error=exc)
            else:
                self._settle(item, result=result)
            finally:
                if self._pending.get(item.key) is item.future:
                    del self._pending[item.key]

    @staticmethod
    def _settle(item: QueuedWrite, result: Any = None, error: BaseException | None = None) -> None:
        if item.future.done():
            return
        if error is not None:
            item.future.set_exception(error)
        else:
            item.future.set_result(result)

    async def join(self) -> None:
        """Wait until every queued write has settled."""
        while self._drainer is not None and not self._drainer.done():
            drainer = self._drainer
            try:
                await asyncio.shield(drainer)
            except asyncio.CancelledError:
                if not drainer.cancelled():
                    raise
                # a cancelled drain reschedules itself when items remain
                await asyncio.sleep(0)
