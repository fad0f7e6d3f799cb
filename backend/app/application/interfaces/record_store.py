"""Abstract repository interface (port) for device record persistence."""

from abc import ABC, abstractmethod

from app.domain.entities import DeviceRecord, RecordDatabase, RecordPatch


class RecordStore(ABC):
    """Port for the record store — implemented in the infrastructure layer.

    Every mutating call is a full load-mutate-save cycle; no instance keeps
    records in memory between calls.
    """

    @abstractmethod
    async def load(self) -> RecordDatabase:
        """Read the whole store. Missing or corrupt data yields an empty database."""
        ...

    @abstractmethod
    async def save(self, database: RecordDatabase) -> None:
        """Write the whole store.

        Raises:
            StoreWriteError: If the durable copy cannot be written.
        """
        ...

    @abstractmethod
    async def append(self, record: DeviceRecord) -> int:
        """Append a record (indexing its card reference) and return its position."""
        ...

    @abstractmethod
    async def find_by_card_reference(self, card_reference: str) -> int | None:
        """Return the position of the record linked to a card, or None."""
        ...

    @abstractmethod
    async def mutate(self, position: int, patch: RecordPatch) -> DeviceRecord:
        """Apply a partial update to one record and persist the store."""
        ...

    @abstractmethod
    async def all_records(self) -> list[DeviceRecord]:
        """Snapshot of every record in insertion order."""
        ...
