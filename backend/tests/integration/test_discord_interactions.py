"""Integration tests for the signed Discord interactions endpoint."""

import json
from pathlib import Path

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from httpx import ASGITransport, AsyncClient

from app.application.services import PasswordState
from app.config import Settings, get_settings
from app.domain.entities import DeviceRecord
from app.infrastructure.dependencies import (
    get_avatar_resolver,
    get_chat_platform,
    get_password_state,
    get_record_store,
)
from app.infrastructure.discord import DiscordClient
from app.infrastructure.storage.json_record_store import JsonRecordStore
from app.main import app
from tests.fakes import FakeAvatarResolver, FakeChatPlatform

TIMESTAMP = "1735732800"
URL = "/api/v1/discord/interactions"


@pytest.fixture
def private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def settings(tmp_path: Path, private_key: Ed25519PrivateKey) -> Settings:
    public_hex = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()
    return Settings(
        _env_file=None,
        intake_auth="s3cret",
        data_dir=str(tmp_path),
        discord_public_key=public_hex,
        password_channel_id="pw-chan",
    )


@pytest.fixture
def store(settings: Settings) -> JsonRecordStore:
    return JsonRecordStore(settings.db_path)


@pytest.fixture
def chat() -> FakeChatPlatform:
    return FakeChatPlatform()


@pytest.fixture
def password_state() -> PasswordState:
    return PasswordState("letmein")


@pytest.fixture
def client(settings, store, chat, password_state):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_chat_platform] = lambda: chat
    app.dependency_overrides[get_avatar_resolver] = lambda: FakeAvatarResolver()
    app.dependency_overrides[get_password_state] = lambda: password_state
    yield AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    app.dependency_overrides.clear()


@pytest.fixture
def post(client, private_key):
    async def _post(payload: dict, signature: str | None = None):
        body = json.dumps(payload).encode()
        if signature is None:
            signature = private_key.sign(TIMESTAMP.encode() + body).hex()
        headers = {
            "X-Signature-Ed25519": signature,
            "X-Signature-Timestamp": TIMESTAMP,
            "Content-Type": "application/json",
        }
        async with client:
            return await client.post(URL, content=body, headers=headers)

    return _post


def _member(permissions: str = "0") -> dict:
    return {"user": {"id": "42", "username": "mod", "discriminator": "0"}, "permissions": permissions}


@pytest.mark.asyncio
async def test_ping_is_answered_with_pong(post):
    response = await post({"type": 1})
    assert response.status_code == 200
    assert response.json() == {"type": 1}


@pytest.mark.asyncio
async def test_bad_signature_is_rejected(post):
    response = await post({"type": 1}, signature="00" * 64)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_button_opens_username_modal(post):
    response = await post({
        "type": 3,
        "data": {"custom_id": "ask_user"},
        "message": {"id": "555"},
        "member": _member(),
    })

    body = response.json()
    assert body["type"] == 9
    assert body["data"]["custom_id"] == "modal_user:555"
    text_input = body["data"]["components"][0]["components"][0]
    assert text_input["custom_id"] == "roblox_username"
    assert text_input["type"] == 4


@pytest.mark.asyncio
async def test_discord_id_modal_submit_updates_record_and_card(post, store, chat):
    await store.append(DeviceRecord(device_user="u1", device_id="d1", card_reference="555"))

    response = await post({
        "type": 5,
        "channel_id": "intake-chan",
        "data": {
            "custom_id": "modal_discordid:555",
            "components": [{"type": 1, "components": [
                {"type": 4, "custom_id": "discord_id", "value": " 123456 "},
            ]}],
        },
        "member": _member(),
    })

    body = response.json()
    assert body["type"] == 4
    assert body["data"]["content"] == "Discord ID saved."
    assert body["data"]["flags"] == 64
    assert (await store.all_records())[0].discord_id == "123456"
    assert chat.cards["555"].fields[-1].value == "**123456** (submitted by mod)"


@pytest.mark.asyncio
async def test_modal_submit_platform_failure_reports_failure(post, chat):
    chat.fail = True
    response = await post({
        "type": 5,
        "channel_id": "intake-chan",
        "data": {
            "custom_id": "modal_user:555",
            "components": [{"type": 1, "components": [
                {"type": 4, "custom_id": "roblox_username", "value": "Bob"},
            ]}],
        },
        "member": _member(),
    })
    assert response.json()["data"]["content"] == "Failed to update."


@pytest.mark.asyncio
async def test_search_is_deferred_then_completed(post, store, chat):
    await store.append(DeviceRecord(device_user="u1", device_id="d1", username="Bob"))

    response = await post({
        "type": 2,
        "token": "tok-1",
        "data": {"name": "search", "options": [
            {"name": "field", "value": "username"},
            {"name": "value", "value": "bob"},
        ]},
        "member": _member(),
    })

    assert response.json() == {"type": 5}
    [edit] = chat.interaction_responses
    assert edit["token"] == "tok-1"
    assert edit["card"].title == "Search Results"
    assert edit["card"].thumbnail_url == "https://cdn.example/avatar.png"


@pytest.mark.asyncio
async def test_search_without_results_says_so(post, chat):
    await post({
        "type": 2,
        "token": "tok-2",
        "data": {"name": "search", "options": [
            {"name": "field", "value": "any"},
            {"name": "value", "value": "nothing"},
        ]},
        "member": _member(),
    })
    assert chat.interaction_responses == [
        {"token": "tok-2", "content": "No matching records.", "card": None}
    ]


@pytest.mark.asyncio
async def test_change_password_requires_manage_guild(post, password_state):
    response = await post({
        "type": 2,
        "data": {"name": "change-password", "options": [{"name": "password", "value": "new"}]},
        "member": _member(permissions="0"),
    })
    assert "Missing permission" in response.json()["data"]["content"]
    assert password_state.current == "letmein"


@pytest.mark.asyncio
async def test_change_password_updates_state_and_channel(post, password_state, chat):
    response = await post({
        "type": 2,
        "data": {"name": "change-password", "options": [{"name": "password", "value": "new"}]},
        "member": _member(permissions=str(0x20)),
    })

    assert response.json()["data"]["content"] == "Password updated."
    assert password_state.current == "new"
    assert chat.texts == [("pw-chan", "GUI PASSWORD: `new`")]


@pytest.mark.asyncio
async def test_blank_modal_value_is_not_reported_as_saved(post, store, chat):
    await store.append(DeviceRecord(device_user="u1", device_id="d1", card_reference="555"))

    response = await post({
        "type": 5,
        "channel_id": "intake-chan",
        "data": {
            "custom_id": "modal_user:555",
            "components": [{"type": 1, "components": [
                {"type": 4, "custom_id": "roblox_username", "value": "   "},
            ]}],
        },
        "member": _member(),
    })

    assert response.json()["data"]["content"] == "Nothing to save: the value was empty."
    assert (await store.all_records())[0].username == ""


@pytest.mark.asyncio
async def test_deferred_search_is_delivered_through_discord_rest(post, store):
    await store.append(DeviceRecord(device_user="u1", device_id="d1", username="Bob"))
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/v10/users/@me":
            return httpx.Response(200, json={"id": "app-9"})
        return httpx.Response(200, json={})

    discord = DiscordClient(
        token="tkn", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    app.dependency_overrides[get_chat_platform] = lambda: discord

    response = await post({
        "type": 2,
        "token": "tok-3",
        "data": {"name": "search", "options": [
            {"name": "field", "value": "username"},
            {"name": "value", "value": "bob"},
        ]},
        "member": _member(),
    })

    assert response.json() == {"type": 5}
    edit = seen[-1]
    assert edit.method == "PATCH"
    assert edit.url.path == "/api/v10/webhooks/app-9/tok-3/messages/@original"
    assert json.loads(edit.content)["embeds"][0]["title"] == "Search Results"
