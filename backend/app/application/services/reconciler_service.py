"""Reconciler — creates records on intake and merges operator identity submissions.

Device ids are the join key across repeated launcher runs on one machine:
once an operator names the owner of any event from a device, every event
from that device carries the same identity.
"""

import logging
from dataclasses import dataclass

from app.application.interfaces import ChatPlatform, RecordStore
from app.application.schemas.intake import IntakeRequest
from app.application.services.card_renderer import (
    build_intake_card,
    identity_label,
    submission_value,
)
from app.domain.entities import DeviceRecord, IdentityField, RecordPatch
from app.domain.entities.device_record import clean
from app.domain.exceptions import EntityNotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """What an identity submission changed.

    ``persisted`` is False on the display-only path where the card exists
    but no stored record is linked to it.
    """

    field: IdentityField
    value: str
    applied: bool = False
    persisted: bool = False
    updated_records: int = 0


class ReconcilerService:
    """Owns the intake and identity-merge rules. Depends on ports only (DI)."""

    def __init__(self, store: RecordStore, chat: ChatPlatform, intake_channel_id: str):
        self._store = store
        self._chat = chat
        self._intake_channel_id = intake_channel_id

    async def record_intake(self, data: IntakeRequest) -> str:
        """Post the intake card, store the record linked to it, return the card reference.

        Raises:
            ValidationError: ``deviceUser`` or ``deviceId`` is empty after trimming.
            ChatPlatformError: The card could not be posted.
            StoreWriteError: The record could not be persisted.
        """
        record = DeviceRecord(
            device_user=clean(data.device_user),
            device_id=clean(data.device_id),
            country=clean(data.country),
            region=clean(data.region),
            city=clean(data.city),
        )
        missing = [
            name
            for name, value in (("deviceUser", record.device_user), ("deviceId", record.device_id))
            if not value
        ]
        if missing:
            raise ValidationError("Missing deviceUser or deviceId", fields=missing)

        card_reference = await self._chat.create_card(
            self._intake_channel_id, build_intake_card(record)
        )
        record.card_reference = clean(card_reference)
        position = await self._store.append(record)
        logger.info(
            "Recorded intake device_id=%s at position %d (card %s)",
            record.device_id, position, record.card_reference,
        )
        return record.card_reference

    async def apply_identity_submission(
        self,
        channel_id: str,
        card_reference: str,
        identity_field: IdentityField,
        value: str,
        submitted_by: str,
    ) -> SubmissionOutcome:
        """Show the submitted value on the card, then merge it into the store.

        The merge targets the record linked to the card and every other record
        with the same device id. An unlinked card still gets the display
        update; nothing is written in that case.
        """
        value = clean(value)
        outcome = SubmissionOutcome(field=identity_field, value=value)
        if not value:
            return outcome

        await self._chat.set_card_field(
            channel_id,
            card_reference,
            identity_label(identity_field),
            submission_value(value, submitted_by),
        )
        outcome.applied = True

        try:
            outcome.updated_records = await self._merge(card_reference, identity_field, value)
        except EntityNotFoundError as e:
            logger.warning("Identity submission not persisted: %s", e)
            return outcome

        outcome.persisted = True
        return outcome

    async def _merge(self, card_reference: str, identity_field: IdentityField, value: str) -> int:
        database = await self._store.load()
        position = database.find_by_card_reference(card_reference)
        if position is None:
            raise EntityNotFoundError("DeviceRecord", card_reference)

        patch = RecordPatch.for_field(identity_field, value)
        targets = database.positions_sharing_device(position)
        for target in targets:
            database.mutate(target, patch)
        await self._store.save(database)

        logger.info(
            "Set %s on %d record(s) for device_id=%s",
            identity_field.value, len(targets), database.records[position].device_id,
        )
        return len(targets)
