"""Unit tests for the ReconcilerService (intake + identity submissions)."""

from pathlib import Path

import pytest

from app.application.schemas import IntakeRequest
from app.application.services import ReconcilerService
from app.domain.entities import DeviceRecord, IdentityField
from app.domain.exceptions import ChatPlatformError, ValidationError
from app.infrastructure.storage.json_record_store import JsonRecordStore
from tests.fakes import FakeChatPlatform


@pytest.fixture
def store(tmp_path: Path) -> JsonRecordStore:
    return JsonRecordStore(tmp_path / "db.json")


@pytest.fixture
def chat() -> FakeChatPlatform:
    return FakeChatPlatform()


@pytest.fixture
def service(store: JsonRecordStore, chat: FakeChatPlatform) -> ReconcilerService:
    return ReconcilerService(store, chat, intake_channel_id="intake-chan")


def _intake(**kwargs) -> IntakeRequest:
    return IntakeRequest(**kwargs)


@pytest.mark.asyncio
async def test_record_intake_creates_linked_record(service, store, chat):
    ref = await service.record_intake(
        _intake(deviceUser="u1", deviceId="d1", country="US", region="CA")
    )

    assert ref in chat.cards
    assert chat.card_channels[ref] == "intake-chan"

    db = await store.load()
    assert len(db.records) == 1
    record = db.records[0]
    assert (record.device_user, record.device_id) == ("u1", "d1")
    assert (record.country, record.region) == ("US", "CA")
    assert record.username == ""
    assert record.discord_id == ""
    assert record.card_reference == ref
    assert db.message_index == {ref: 0}


@pytest.mark.asyncio
async def test_record_intake_trims_fields(service, store):
    await service.record_intake(_intake(deviceUser="  u1 ", deviceId=" d1\n", city=" Austin "))
    record = (await store.all_records())[0]
    assert (record.device_user, record.device_id, record.city) == ("u1", "d1", "Austin")


@pytest.mark.asyncio
async def test_intake_card_shows_device_and_location(service, chat):
    ref = await service.record_intake(_intake(deviceUser="u1", deviceId="d1", country="US"))
    card = chat.cards[ref]

    assert card.title == "Player Database Log"
    names = [f.name for f in card.fields]
    assert names == ["Device User", "Device ID", "Approx. Location"]
    assert card.fields[2].value == "**Country:** US"
    assert [b.custom_id for b in card.buttons] == ["ask_user", "ask_id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"deviceUser": "u1"}, {"deviceId": "d1"}, {"deviceUser": "  ", "deviceId": "d1"}, {}],
)
async def test_record_intake_requires_device_fields(service, store, chat, payload):
    with pytest.raises(ValidationError):
        await service.record_intake(_intake(**payload))
    assert chat.cards == {}
    assert await store.all_records() == []


@pytest.mark.asyncio
async def test_record_intake_platform_failure_stores_nothing(service, store, chat):
    chat.fail = True
    with pytest.raises(ChatPlatformError):
        await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    assert await store.all_records() == []


@pytest.mark.asyncio
async def test_username_propagates_to_every_record_of_the_device(service, store, chat):
    await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    second = await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    await service.record_intake(_intake(deviceUser="u2", deviceId="d2"))

    outcome = await service.apply_identity_submission(
        "intake-chan", second, IdentityField.USERNAME, " Bob ", "mod#0001"
    )

    assert outcome.applied and outcome.persisted
    assert outcome.updated_records == 2
    records = await store.all_records()
    assert [r.username for r in records] == ["Bob", "Bob", ""]

    field = chat.cards[second].fields[-1]
    assert field.name == "Roblox Username"
    assert field.value == "**Bob** (submitted by mod#0001)"


@pytest.mark.asyncio
async def test_discord_id_keeps_existing_username(service, store):
    ref = await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    await service.apply_identity_submission("c", ref, IdentityField.USERNAME, "Bob", "mod")
    await service.apply_identity_submission("c", ref, IdentityField.DISCORD_ID, "1234", "mod")

    record = (await store.all_records())[0]
    assert (record.username, record.discord_id) == ("Bob", "1234")


@pytest.mark.asyncio
async def test_last_submission_wins(service, store, chat):
    first = await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    second = await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    await service.apply_identity_submission("c", first, IdentityField.USERNAME, "Alice", "mod")
    await service.apply_identity_submission("c", second, IdentityField.USERNAME, "Bob", "mod")

    assert {r.username for r in await store.all_records()} == {"Bob"}
    # a resubmission replaces the field on the card rather than adding another
    assert [f.name for f in chat.cards[second].fields].count("Roblox Username") == 1


@pytest.mark.asyncio
async def test_empty_submission_is_a_no_op(service, store, chat):
    ref = await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    fields_before = len(chat.cards[ref].fields)

    outcome = await service.apply_identity_submission("c", ref, IdentityField.USERNAME, "   ", "mod")

    assert not outcome.applied
    assert len(chat.cards[ref].fields) == fields_before
    assert (await store.all_records())[0].username == ""


@pytest.mark.asyncio
async def test_unlinked_card_gets_display_only_update(service, store, chat):
    await store.append(DeviceRecord(device_user="u1", device_id="d1", card_reference="m1"))

    outcome = await service.apply_identity_submission(
        "c", "unknown-card", IdentityField.USERNAME, "Bob", "mod"
    )

    assert outcome.applied
    assert not outcome.persisted
    assert chat.cards["unknown-card"].fields[0].value.startswith("**Bob**")
    assert (await store.all_records())[0].username == ""


@pytest.mark.asyncio
async def test_card_edit_failure_is_raised_and_nothing_persisted(service, store, chat):
    ref = await service.record_intake(_intake(deviceUser="u1", deviceId="d1"))
    chat.fail = True

    with pytest.raises(ChatPlatformError):
        await service.apply_identity_submission("c", ref, IdentityField.USERNAME, "Bob", "mod")
    assert (await store.all_records())[0].username == ""
