"""Domain entities for record search and aggregation."""

from dataclasses import dataclass, field
from enum import Enum


class SearchField(str, Enum):
    """Which record fields a search query is matched against."""

    USERNAME = "username"
    DEVICE_ID = "deviceid"
    DEVICE_USER = "deviceuser"
    LOCATION = "location"
    ANY = "any"

    @classmethod
    def parse(cls, raw: "str | SearchField | None") -> "SearchField":
        """Resolve a user-supplied field name; anything unrecognised means ANY."""
        if isinstance(raw, SearchField):
            return raw
        key = (raw or "").strip().lower().replace("_", "").replace("-", "").replace(" ", "")
        for member in cls:
            if member.value == key:
                return member
        return cls.ANY


@dataclass
class SearchSummary:
    """Deduplicated view over a non-empty set of matching records.

    List fields are display-ready: each is capped and, when capped, ends
    with a ``… (+N more)`` marker entry.
    """

    device_ids: list[str] = field(default_factory=list)
    device_users: list[str] = field(default_factory=list)
    timestamps: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    avatar_name: str | None = None
