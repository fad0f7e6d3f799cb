"""Discord REST client — implements the ChatPlatform interface.

Talks to the Discord HTTP API (https://discord.com/api/v10) with httpx.
Cards become embeds with an action row of buttons; interaction
follow-ups go through the application webhook endpoints.
"""

import json
import logging
from datetime import datetime
from typing import Any

import httpx

from app.application.interfaces.chat_platform import ChatPlatform
from app.application.services.card_renderer import INTAKE_CARD_TITLE
from app.domain.entities import Card, ChannelMessage
from app.domain.exceptions import ChatPlatformError

logger = logging.getLogger(__name__)

_NO_MENTIONS = {"parse": []}


def card_to_embed(card: Card) -> dict[str, Any]:
    """Convert a domain Card to a Discord embed object."""
    embed: dict[str, Any] = {"title": card.title}
    if card.description:
        embed["description"] = card.description
    if card.fields:
        embed["fields"] = [
            {"name": f.name, "value": f.value, "inline": f.inline} for f in card.fields
        ]
    if card.thumbnail_url:
        embed["thumbnail"] = {"url": card.thumbnail_url}
    if card.timestamp:
        embed["timestamp"] = card.timestamp.isoformat()
    return embed


def card_to_components(card: Card) -> list[dict[str, Any]]:
    """Convert card buttons to a single Discord action row (empty when no buttons)."""
    if not card.buttons:
        return []
    return [{
        "type": 1,
        "components": [
            {"type": 2, "style": int(b.style), "label": b.label, "custom_id": b.custom_id}
            for b in card.buttons
        ],
    }]


def upsert_embed_field(embed: dict[str, Any], name: str, value: str) -> dict[str, Any]:
    """Replace the field called ``name`` or append it; returns the embed."""
    fields = list(embed.get("fields") or [])
    for f in fields:
        if f.get("name") == name:
            f["value"] = value
            break
    else:
        fields.append({"name": name, "value": value, "inline": False})
    embed["fields"] = fields
    return embed


class DiscordClient(ChatPlatform):
    """Infrastructure adapter — connects to the Discord REST API as a bot."""

    def __init__(
        self,
        token: str,
        application_id: str = "",
        base_url: str = "https://discord.com/api/v10",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._token = token
        self._application_id = application_id
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client
        self._bot_user_id: str | None = None

    @property
    def platform_name(self) -> str:
        return "discord"

    @property
    def is_ready(self) -> bool:
        return bool(self._token)

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bot {self._token}",
            "User-Agent": "DiscordBot (device-intake-bridge, 0.1.0)",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=30.0)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request; returns parsed JSON (None for 204)."""
        if not self.is_ready:
            raise ChatPlatformError(self.platform_name, 503, "Discord token is not configured")

        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.request(
                method, f"{self._base_url}{path}", headers=self._get_headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            raise ChatPlatformError(self.platform_name, 502, f"{type(exc).__name__}: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code >= 400:
            self._raise_platform_error(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _raise_platform_error(self, response: httpx.Response) -> None:
        """Raise ChatPlatformError from a failed httpx Response."""
        try:
            message = response.json().get("message", response.text)
        except (ValueError, AttributeError):
            message = response.text
        logger.error("Discord API error %d: %s", response.status_code, message)
        raise ChatPlatformError(
            platform=self.platform_name,
            status_code=response.status_code,
            message=message,
        )

    # ── Cards ───────────────────────────────────────────────────────

    async def create_card(self, channel_id: str, card: Card) -> str:
        payload: dict[str, Any] = {
            "embeds": [card_to_embed(card)],
            "allowed_mentions": _NO_MENTIONS,
        }
        components = card_to_components(card)
        if components:
            payload["components"] = components
        data = await self._request("POST", f"/channels/{channel_id}/messages", json=payload)
        return str(data["id"])

    async def set_card_field(
        self, channel_id: str, card_reference: str, name: str, value: str
    ) -> None:
        path = f"/channels/{channel_id}/messages/{card_reference}"
        message = await self._request("GET", path)
        embeds = message.get("embeds") or []
        embed = embeds[0] if embeds else {"title": INTAKE_CARD_TITLE}
        upsert_embed_field(embed, name, value)
        await self._request(
            "PATCH",
            path,
            json={"embeds": [embed], "components": message.get("components") or []},
        )

    # ── Plain messages ──────────────────────────────────────────────

    async def send_text(self, channel_id: str, content: str) -> str:
        data = await self._request(
            "POST",
            f"/channels/{channel_id}/messages",
            json={"content": content, "allowed_mentions": _NO_MENTIONS},
        )
        return str(data["id"])

    async def send_file(self, channel_id: str, filename: str, content: bytes) -> str:
        payload = {
            "allowed_mentions": _NO_MENTIONS,
            "attachments": [{"id": 0, "filename": filename}],
        }
        data = await self._request(
            "POST",
            f"/channels/{channel_id}/messages",
            data={"payload_json": json.dumps(payload)},
            files={"files[0]": (filename, content, "application/octet-stream")},
        )
        return str(data["id"])

    async def list_messages(self, channel_id: str, limit: int = 50) -> list[ChannelMessage]:
        data = await self._request(
            "GET", f"/channels/{channel_id}/messages", params={"limit": limit}
        )
        return [
            ChannelMessage(
                id=str(m["id"]),
                author_id=str((m.get("author") or {}).get("id", "")),
                content=m.get("content") or "",
                created_at=datetime.fromisoformat(m["timestamp"]),
            )
            for m in data or []
        ]

    async def edit_text(self, channel_id: str, message_id: str, content: str) -> None:
        await self._request(
            "PATCH", f"/channels/{channel_id}/messages/{message_id}", json={"content": content}
        )

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        await self._request("DELETE", f"/channels/{channel_id}/messages/{message_id}")

    async def bot_user_id(self) -> str:
        if self._bot_user_id is None:
            data = await self._request("GET", "/users/@me")
            self._bot_user_id = str(data["id"])
        return self._bot_user_id

    # ── Interactions & commands ─────────────────────────────────────

    async def _resolve_application_id(self) -> str:
        return self._application_id or await self.bot_user_id()

    async def edit_interaction_response(
        self, interaction_token: str, *, content: str | None = None, card: Card | None = None
    ) -> None:
        app_id = await self._resolve_application_id()
        payload: dict[str, Any] = {"allowed_mentions": _NO_MENTIONS}
        if content is not None:
            payload["content"] = content
        if card is not None:
            payload["embeds"] = [card_to_embed(card)]
        await self._request(
            "PATCH", f"/webhooks/{app_id}/{interaction_token}/messages/@original", json=payload
        )

    async def register_commands(self, commands: list[dict[str, Any]], guild_id: str = "") -> None:
        """Clear global commands, then register ``commands`` for the guild (or globally)."""
        app_id = await self._resolve_application_id()
        await self._request("PUT", f"/applications/{app_id}/commands", json=[])
        if guild_id:
            path = f"/applications/{app_id}/guilds/{guild_id}/commands"
            await self._request("PUT", path, json=[])
            await self._request("PUT", path, json=commands)
            logger.info("Registered %d guild command(s); global commands cleared", len(commands))
        else:
            await self._request("PUT", f"/applications/{app_id}/commands", json=commands)
            logger.warning("DISCORD_GUILD_ID not set, registered global commands")
