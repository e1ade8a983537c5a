"""Shared protocol and types for document store backends."""

from dataclasses import dataclass
from typing import Callable, List, Literal, Protocol

from uvguard.models import NewUVRecord, UVRecord

ChangeType = Literal["added", "modified", "removed"]


@dataclass(frozen=True)
class DocumentChange:
    """One entry of a live-query change batch."""
    type: ChangeType
    record: UVRecord


ChangeCallback = Callable[[List[DocumentChange]], None]


class DocumentStore(Protocol):
    """Protocol for the remote collection of UV records."""

    async def add_record(self, record: NewUVRecord) -> str:
        """Persist a record with a store-assigned id and timestamp; return the id."""

    async def list_records(self) -> List[UVRecord]:
        """Return all records, newest first."""

    def watch(self, callback: ChangeCallback) -> Callable[[], None]:
        """Start a live query; the first batch lists existing records as `added`."""

    async def enable_network(self) -> None:
        """Resume remote traffic."""

    async def disable_network(self) -> None:
        """Stop remote traffic; reads and writes raise StoreUnavailable until re-enabled."""
