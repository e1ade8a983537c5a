"""Retry envelope for remote operations.

Every call that leaves the process (OpenUV fetches, document store writes)
runs through `ResilientExecutor.run`. Failures bump the shared
`ConnectionState` counter; once it reaches `max_retries` the state flips
offline, the store's network access is switched off and the original
exception propagates. Between attempts the executor sleeps
``2 ** retry_attempts * backoff_base_ms`` milliseconds (200, 400, ... ms
with the defaults).
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Protocol, TypeVar

from uvguard.connection import ConnectionState
from uvguard.errors import InvalidArgument
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="resilience")

T = TypeVar("T")

DEFAULT_BACKOFF_BASE_MS = 100


class NetworkToggle(Protocol):
    """Anything whose network access can be switched on and off."""

    async def enable_network(self) -> None:
        """Allow remote traffic (idempotent)."""

    async def disable_network(self) -> None:
        """Stop remote traffic until re-enabled."""


class NullNetworkToggle:
    """Transport that has nothing to toggle."""

    async def enable_network(self) -> None:
        return None

    async def disable_network(self) -> None:
        return None


def backoff_delay(attempt: int, base_ms: int = DEFAULT_BACKOFF_BASE_MS) -> float:
    """Seconds to wait after the `attempt`-th consecutive failure."""
    return (2 ** attempt) * base_ms / 1000.0


class ResilientExecutor:
    """Run zero-argument async operations with bounded retry and backoff."""

    def __init__(
        self,
        state: ConnectionState,
        transport: NetworkToggle | None = None,
        *,
        backoff_base_ms: int = DEFAULT_BACKOFF_BASE_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.state = state
        self.transport = transport or NullNetworkToggle()
        self.backoff_base_ms = backoff_base_ms
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await `operation()` until it succeeds or the retry budget is spent."""
        while True:
            if self.state.is_online:
                await self.transport.enable_network()
            try:
                result = await operation()
            except InvalidArgument:
                raise
            except Exception as exc:
                attempts = self.state.record_failure()
                if self.state.exhausted:
                    logger.error(
                        "Remote operation failed; retries exhausted, going offline",
                        extra={"attempts": attempts, "error": repr(exc)},
                    )
                    self.state.set_online_status(False)
                    await self.transport.disable_network()
                    raise
                delay = backoff_delay(attempts, self.backoff_base_ms)
                logger.warning(
                    "Remote operation failed; retrying",
                    extra={"attempts": attempts, "delay_s": delay, "error": repr(exc)},
                )
                await self._sleep(delay)
                continue
            if self.state.retry_attempts or not self.state.is_online:
                self.state.set_online_status(True)
            return result
