"""Query engine — filters device records and folds matches into a summary.

Pure functions over ``DeviceRecord`` lists; loading the store and
rendering results happen in ``SearchService``.
"""

from collections.abc import Iterable, Sequence

from app.domain.entities import DeviceRecord, SearchField, SearchSummary
from app.domain.entities.device_record import clean

MAX_LIST_ITEMS = 10
MAX_TIMESTAMPS = 15
TRUNCATION_PREFIX = "… (+"


def _contains(candidate: str, needle: str) -> bool:
    return needle in clean(candidate).lower()


def _location_matches(record: DeviceRecord, needle: str) -> bool:
    return any(_contains(part, needle) for part in (record.city, record.region, record.country))


def matches(record: DeviceRecord, field: SearchField, needle: str) -> bool:
    """Case-insensitive substring test of an already-lowered needle."""
    if field is SearchField.USERNAME:
        return _contains(record.username, needle)
    if field is SearchField.DEVICE_ID:
        return _contains(record.device_id, needle)
    if field is SearchField.DEVICE_USER:
        return _contains(record.device_user, needle)
    if field is SearchField.LOCATION:
        return _location_matches(record, needle)
    return (
        _contains(record.username, needle)
        or _contains(record.device_user, needle)
        or _contains(record.device_id, needle)
        or _location_matches(record, needle)
    )


def search_records(
    records: Iterable[DeviceRecord],
    field: SearchField | str | None,
    value: str | None,
) -> list[DeviceRecord]:
    """Return matching records in their original insertion order."""
    search_field = SearchField.parse(field)
    needle = clean(value).lower()
    return [r for r in records if matches(r, search_field, needle)]


def truncate_list(items: Sequence[str], max_items: int = MAX_LIST_ITEMS) -> list[str]:
    """Cap a display list, appending a ``… (+N more)`` marker when capped."""
    if len(items) <= max_items:
        return list(items)
    more = len(items) - max_items
    return [*items[:max_items], f"{TRUNCATION_PREFIX}{more} more)"]


def is_truncation_marker(item: str) -> bool:
    return item.startswith(TRUNCATION_PREFIX)


def location_key(record: DeviceRecord) -> str:
    return "|".join(clean(p).lower() for p in (record.city, record.region, record.country))


def aggregate(
    records: Iterable[DeviceRecord],
    *,
    max_items: int = MAX_LIST_ITEMS,
    max_timestamps: int = MAX_TIMESTAMPS,
) -> SearchSummary:
    """Deduplicate a non-empty match set into display-ready lists."""
    device_ids: dict[str, None] = {}
    device_users: dict[str, None] = {}
    timestamps: set[str] = set()
    locations: dict[str, str] = {}
    avatar_name: str | None = None

    for record in records:
        if record.device_id:
            device_ids.setdefault(record.device_id, None)
        if record.device_user:
            device_users.setdefault(record.device_user, None)
        if record.timestamp:
            timestamps.add(record.timestamp)

        parts = record.location_parts
        if parts:
            locations.setdefault(location_key(record), ", ".join(parts))

        if avatar_name is None and clean(record.username):
            avatar_name = clean(record.username)

    return SearchSummary(
        device_ids=truncate_list(list(device_ids), max_items),
        device_users=truncate_list(list(device_users), max_items),
        timestamps=truncate_list(sorted(timestamps), max_timestamps),
        locations=truncate_list(list(locations.values()), max_items),
        avatar_name=avatar_name,
    )
