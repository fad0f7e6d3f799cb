"""Domain entities for device intake records and the in-memory record database."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from app.domain.exceptions import EntityNotFoundError


def utc_timestamp() -> str:
    """Fixed-format UTC instant, e.g. ``2025-11-09T18:04:05.123Z``.

    The format is fixed-width so lexicographic order equals chronological order.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def clean(value: object) -> str:
    """Coerce to string and trim; ``None`` becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip()


class IdentityField(str, Enum):
    """Identity fields an operator can attach to a record after intake."""

    USERNAME = "username"
    DISCORD_ID = "discord_id"


@dataclass
class RecordPatch:
    """Partial update — only non-empty values overwrite existing fields."""

    username: str = ""
    discord_id: str = ""

    @classmethod
    def for_field(cls, identity_field: IdentityField, value: str) -> "RecordPatch":
        if identity_field is IdentityField.USERNAME:
            return cls(username=clean(value))
        return cls(discord_id=clean(value))

    def is_empty(self) -> bool:
        return not (self.username or self.discord_id)


@dataclass
class DeviceRecord:
    """One intake event reported by the launcher, later enriched by operators."""

    device_user: str
    device_id: str
    country: str = ""
    region: str = ""
    city: str = ""
    username: str = ""
    discord_id: str = ""
    card_reference: str = ""
    timestamp: str = field(default_factory=utc_timestamp)

    def apply(self, patch: RecordPatch) -> None:
        """Merge a patch into this record."""
        if patch.username:
            self.username = patch.username
        if patch.discord_id:
            self.discord_id = patch.discord_id

    @property
    def location_parts(self) -> list[str]:
        """Non-empty ``city, region, country`` parts, most specific first."""
        return [p for p in (clean(self.city), clean(self.region), clean(self.country)) if p]


@dataclass
class RecordDatabase:
    """Insertion-ordered records plus a ``card_reference -> position`` index.

    Records are never removed; only the identity fields are mutated in place.
    """

    records: list[DeviceRecord] = field(default_factory=list)
    message_index: dict[str, int] = field(default_factory=dict)

    def append(self, record: DeviceRecord) -> int:
        self.records.append(record)
        position = len(self.records) - 1
        if record.card_reference:
            self.message_index[record.card_reference] = position
        return position

    def find_by_card_reference(self, card_reference: str) -> int | None:
        position = self.message_index.get(clean(card_reference))
        if position is None or not 0 <= position < len(self.records):
            return None
        return position

    def get(self, position: int) -> DeviceRecord:
        if not 0 <= position < len(self.records):
            raise EntityNotFoundError("DeviceRecord", position)
        return self.records[position]

    def mutate(self, position: int, patch: RecordPatch) -> DeviceRecord:
        record = self.get(position)
        record.apply(patch)
        return record

    def positions_sharing_device(self, position: int) -> list[int]:
        """Positions of every record with the same device id, the target included."""
        device_id = self.get(position).device_id
        if not device_id:
            return [position]
        return [i for i, r in enumerate(self.records) if r.device_id == device_id]

    def reindex(self) -> int:
        """Repair the index after loading; returns the number of entries changed.

        Entries pointing out of range or at a record with another card
        reference are dropped, and unindexed references are added.
        """
        changed = 0
        for ref, position in list(self.message_index.items()):
            valid = (
                isinstance(position, int)
                and 0 <= position < len(self.records)
                and self.records[position].card_reference == ref
            )
            if not valid:
                del self.message_index[ref]
                changed += 1
        for position, record in enumerate(self.records):
            if record.card_reference and record.card_reference not in self.message_index:
                self.message_index[record.card_reference] = position
                changed += 1
        return changed
