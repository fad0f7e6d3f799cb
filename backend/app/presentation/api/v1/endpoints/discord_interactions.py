"""Discord HTTP interactions endpoint — slash commands, buttons and modals.

Discord POSTs every interaction here; the request must carry a valid
Ed25519 signature and be answered within three seconds, so searches are
deferred and completed from a background task.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from app.application.interfaces import ChatPlatform
from app.application.services import PasswordService, ReconcilerService, SearchService
from app.application.services.card_renderer import (
    ASK_DISCORD_ID_BUTTON,
    ASK_USERNAME_BUTTON,
)
from app.application.services.search_service import NO_RESULTS_MESSAGE
from app.config import Settings, get_settings
from app.domain.entities import IdentityField
from app.domain.exceptions import ChatPlatformError, StoreWriteError
from app.infrastructure.dependencies import (
    get_chat_platform,
    get_password_service,
    get_reconciler_service,
    get_search_service,
)
from app.infrastructure.discord import verify_interaction_signature
from app.infrastructure.discord.commands import (
    APPLICATION_COMMAND,
    CHANGE_PASSWORD_COMMAND,
    CHANNEL_MESSAGE,
    DEFERRED_CHANNEL_MESSAGE,
    EPHEMERAL,
    MANAGE_GUILD,
    MESSAGE_COMPONENT,
    MODAL,
    MODAL_SUBMIT,
    PING,
    PONG,
    SEARCH_COMMAND,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discord", tags=["Discord"])

# button custom id → (modal custom id prefix, modal title, input custom id, input label, field)
_IDENTITY_MODALS: dict[str, tuple[str, str, str, str, IdentityField]] = {
    ASK_USERNAME_BUTTON: (
        "modal_user", "Enter Roblox Username", "roblox_username", "Roblox Username",
        IdentityField.USERNAME,
    ),
    ASK_DISCORD_ID_BUTTON: (
        "modal_discordid", "Enter Discord ID", "discord_id", "Discord ID",
        IdentityField.DISCORD_ID,
    ),
}
_MODALS_BY_PREFIX = {modal[0]: modal for modal in _IDENTITY_MODALS.values()}
_SAVED_MESSAGES = {
    IdentityField.USERNAME: "Username saved.",
    IdentityField.DISCORD_ID: "Discord ID saved.",
}


def _ephemeral(content: str) -> dict[str, Any]:
    return {"type": CHANNEL_MESSAGE, "data": {"content": content, "flags": EPHEMERAL}}


def _options(interaction: dict[str, Any]) -> dict[str, Any]:
    return {
        o.get("name"): o.get("value")
        for o in (interaction.get("data") or {}).get("options") or []
    }


def _user(interaction: dict[str, Any]) -> dict[str, Any]:
    return (interaction.get("member") or {}).get("user") or interaction.get("user") or {}


def _user_tag(interaction: dict[str, Any]) -> str:
    user = _user(interaction)
    name = user.get("username") or "unknown"
    discriminator = user.get("discriminator")
    if discriminator and discriminator != "0":
        return f"{name}#{discriminator}"
    return name


def _modal_value(interaction: dict[str, Any], input_id: str) -> str:
    for row in (interaction.get("data") or {}).get("components") or []:
        for component in row.get("components") or []:
            if component.get("custom_id") == input_id:
                return component.get("value") or ""
    return ""


def _has_manage_guild(interaction: dict[str, Any]) -> bool:
    raw = (interaction.get("member") or {}).get("permissions") or "0"
    try:
        return bool(int(raw) & MANAGE_GUILD)
    except ValueError:
        return False


async def _complete_search(
    service: SearchService, chat: ChatPlatform, token: str, field: str, value: str
) -> None:
    """Fill in the deferred search response."""
    try:
        outcome = await service.search(field, value)
        card = outcome.to_card()
        if card is None:
            await chat.edit_interaction_response(token, content=NO_RESULTS_MESSAGE)
        else:
            await chat.edit_interaction_response(token, card=card)
    except ChatPlatformError:
        logger.exception("Could not deliver search results")


@router.post("/interactions")
async def handle_interaction(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    chat: ChatPlatform = Depends(get_chat_platform),
    reconciler: ReconcilerService = Depends(get_reconciler_service),
    search_service: SearchService = Depends(get_search_service),
    passwords: PasswordService = Depends(get_password_service),
) -> dict:
    body = await request.body()
    if not verify_interaction_signature(
        settings.discord_public_key,
        request.headers.get("X-Signature-Ed25519", ""),
        request.headers.get("X-Signature-Timestamp", ""),
        body,
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid request signature")

    try:
        interaction = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid JSON body")

    kind = interaction.get("type")
    if kind == PING:
        return {"type": PONG}
    if kind == APPLICATION_COMMAND:
        return await _handle_command(interaction, background_tasks, chat, search_service, passwords)
    if kind == MESSAGE_COMPONENT:
        return _handle_button(interaction)
    if kind == MODAL_SUBMIT:
        return await _handle_modal(interaction, reconciler)

    logger.warning("Unhandled interaction type %r", kind)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="unsupported interaction type")


async def _handle_command(
    interaction: dict[str, Any],
    background_tasks: BackgroundTasks,
    chat: ChatPlatform,
    search_service: SearchService,
    passwords: PasswordService,
) -> dict:
    name = (interaction.get("data") or {}).get("name")
    options = _options(interaction)

    if name == CHANGE_PASSWORD_COMMAND:
        if not _has_manage_guild(interaction):
            return _ephemeral("Missing permission: Manage Server.")
        background_tasks.add_task(passwords.change_password, str(options.get("password") or ""))
        logger.info("Password change requested by %s", _user_tag(interaction))
        return _ephemeral("Password updated.")

    if name == SEARCH_COMMAND:
        background_tasks.add_task(
            _complete_search,
            search_service,
            chat,
            interaction.get("token", ""),
            str(options.get("field") or ""),
            str(options.get("value") or ""),
        )
        return {"type": DEFERRED_CHANNEL_MESSAGE}

    logger.warning("Unknown command %r", name)
    return _ephemeral("Unknown command.")


def _handle_button(interaction: dict[str, Any]) -> dict:
    custom_id = (interaction.get("data") or {}).get("custom_id")
    message_id = (interaction.get("message") or {}).get("id")
    modal = _IDENTITY_MODALS.get(custom_id)
    if modal is None or not message_id:
        return _ephemeral("Unknown action.")

    prefix, title, input_id, label, _ = modal
    return {
        "type": MODAL,
        "data": {
            "custom_id": f"{prefix}:{message_id}",
            "title": title,
            "components": [{
                "type": 1,
                "components": [{
                    "type": 4,
                    "custom_id": input_id,
                    "label": label,
                    "style": 1,
                    "required": True,
                }],
            }],
        },
    }


async def _handle_modal(interaction: dict[str, Any], reconciler: ReconcilerService) -> dict:
    custom_id = (interaction.get("data") or {}).get("custom_id") or ""
    prefix, _, card_reference = custom_id.partition(":")
    modal = _MODALS_BY_PREFIX.get(prefix)
    if modal is None or not card_reference:
        return _ephemeral("Unknown form.")

    _, _, input_id, _, identity_field = modal
    try:
        outcome = await reconciler.apply_identity_submission(
            channel_id=str(interaction.get("channel_id") or ""),
            card_reference=card_reference,
            identity_field=identity_field,
            value=_modal_value(interaction, input_id),
            submitted_by=_user_tag(interaction),
        )
    except (ChatPlatformError, StoreWriteError):
        logger.exception("%s edit error", prefix)
        return _ephemeral("Failed to update.")
    if not outcome.applied:
        return _ephemeral("Nothing to save: the value was empty.")
    return _ephemeral(_SAVED_MESSAGES[identity_field])
