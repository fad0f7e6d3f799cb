"""JSON-file implementation of the RecordStore port.

Layout of the blob (kept compatible with records written by earlier
versions of the bot)::

    {"records": [{"ts": ..., "deviceUser": ..., "deviceId": ..., "messageId": ...}],
     "messageIndex": {"<messageId>": 0}}
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from app.application.interfaces import RecordStore
from app.domain.entities import DeviceRecord, RecordDatabase, RecordPatch
from app.domain.entities.device_record import clean
from app.domain.exceptions import StoreWriteError

logger = logging.getLogger(__name__)

# entity attribute → JSON key
_KEYS = {
    "timestamp": "ts",
    "device_user": "deviceUser",
    "device_id": "deviceId",
    "country": "country",
    "region": "region",
    "city": "city",
    "card_reference": "messageId",
    "username": "username",
    "discord_id": "discordId",
}


def record_to_dict(record: DeviceRecord) -> dict[str, str]:
    """Map domain entity → JSON object; empty optional fields are omitted."""
    data = {}
    for attr, key in _KEYS.items():
        value = getattr(record, attr)
        if value or attr in ("timestamp", "device_user", "device_id"):
            data[key] = value
    return data


def record_from_dict(data: dict[str, Any]) -> DeviceRecord:
    """Map JSON object → domain entity."""
    values = {attr: clean(data.get(key)) for attr, key in _KEYS.items()}
    return DeviceRecord(**values)


def database_to_dict(database: RecordDatabase) -> dict[str, Any]:
    return {
        "records": [record_to_dict(r) for r in database.records],
        "messageIndex": dict(database.message_index),
    }


def database_from_dict(data: dict[str, Any]) -> RecordDatabase:
    records = [record_from_dict(r) for r in data.get("records") or [] if isinstance(r, dict)]
    index = data.get("messageIndex") or {}
    database = RecordDatabase(
        records=records,
        message_index={str(k): v for k, v in index.items()} if isinstance(index, dict) else {},
    )
    repaired = database.reindex()
    if repaired:
        logger.warning("Repaired %d message index entr(y/ies) on load", repaired)
    return database


class JsonRecordStore(RecordStore):
    """Implements the RecordStore port on a single JSON file."""

    def __init__(self, db_file: str | Path):
        self._path = Path(db_file)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> RecordDatabase:
        if not self._path.exists():
            return RecordDatabase()
        try:
            raw = self._path.read_text("utf-8")
            if not raw.strip():
                return RecordDatabase()
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return database_from_dict(data)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not read %s — starting from an empty store: %s", self._path, exc)
            return RecordDatabase()

    async def save(self, database: RecordDatabase) -> None:
        """Write to a temp file in the same directory, then atomically replace."""
        payload = json.dumps(database_to_dict(database), indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self._path.parent,
                prefix=f".{self._path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name:
                Path(tmp_name).unlink(missing_ok=True)
            logger.error("Failed to write record store %s: %s", self._path, exc)
            raise StoreWriteError(str(self._path), str(exc)) from exc

        logger.debug("Saved %d record(s) to %s", len(database.records), self._path)

    async def append(self, record: DeviceRecord) -> int:
        database = await self.load()
        position = database.append(record)
        await self.save(database)
        return position

    async def find_by_card_reference(self, card_reference: str) -> int | None:
        database = await self.load()
        return database.find_by_card_reference(card_reference)

    async def mutate(self, position: int, patch: RecordPatch) -> DeviceRecord:
        database = await self.load()
        record = database.mutate(position, patch)
        await self.save(database)
        return record

    async def all_records(self) -> list[DeviceRecord]:
        database = await self.load()
        return database.records
