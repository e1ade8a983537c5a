"""Online/offline state shared by everything that talks to a remote."""

from __future__ import annotations

from typing import Callable, List

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="connection")

ConnectionListener = Callable[[bool], None]

DEFAULT_MAX_RETRIES = 3


class ConnectionState:
    """Online flag plus the retry counter that drives it.

    One instance is shared by the executor, the UV client and the write
    queue of a service; listeners are notified synchronously on every
    `set_online_status` call.
    """

    def __init__(self, *, max_retries: int = DEFAULT_MAX_RETRIES, is_online: bool = True) -> None:
        self.is_online = is_online
        self.retry_attempts = 0
        self.max_retries = max_retries
        self._listeners: List[ConnectionListener] = []

    @property
    def exhausted(self) -> bool:
        """True once the shared retry budget is used up."""
        return self.retry_attempts >= self.max_retries

    def record_failure(self) -> int:
        """Count one failed attempt and return the new total."""
        self.retry_attempts += 1
        return self.retry_attempts

    def set_online_status(self, online: bool) -> None:
        """Set the flag, reset the counter when online, and notify listeners."""
        if online != self.is_online:
            logger.info("Connection state changed", extra={"online": online, "retry_attempts": self.retry_attempts})
        self.is_online = online
        if online:
            self.retry_attempts = 0
        for listener in list(self._listeners):
            try:
                listener(online)
            except Exception:
                logger.exception("Connection listener failed", extra={"listener": repr(listener)})

    def subscribe(self, listener: ConnectionListener) -> Callable[[], None]:
        """Register `listener`; the returned callable removes it again."""
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
