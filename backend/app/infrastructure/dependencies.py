"""FastAPI dependency injection — wires infrastructure to application layer."""

import secrets
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from app.config import Settings, get_settings
from app.application.interfaces import AvatarResolver, ChatPlatform, RecordStore
from app.application.services import (
    LogTextService,
    PasswordService,
    PasswordState,
    ReconcilerService,
    SearchService,
)
from app.domain.exceptions import UnauthorizedError
from app.infrastructure.discord import DiscordClient
from app.infrastructure.roblox import RobloxAvatarResolver
from app.infrastructure.storage.json_record_store import JsonRecordStore


@lru_cache
def get_password_state() -> PasswordState:
    """Process-wide password state, seeded from DEFAULT_PASSWORD."""
    return PasswordState(current=get_settings().default_password)


@lru_cache
def get_discord_client() -> DiscordClient:
    settings = get_settings()
    return DiscordClient(
        token=settings.discord_token,
        application_id=settings.discord_application_id,
        base_url=settings.discord_api_base_url,
    )


def get_chat_platform() -> ChatPlatform:
    return get_discord_client()


def get_record_store(settings: Settings = Depends(get_settings)) -> RecordStore:
    return JsonRecordStore(settings.db_path)


def get_avatar_resolver(settings: Settings = Depends(get_settings)) -> AvatarResolver:
    return RobloxAvatarResolver(
        users_url=settings.roblox_users_url,
        thumbnails_url=settings.roblox_thumbnails_url,
    )


def check_intake_auth(settings: Settings, provided: str | None) -> None:
    """Raise UnauthorizedError unless ``provided`` equals the configured secret."""
    expected = settings.intake_auth
    if not expected or not provided or not secrets.compare_digest(provided, expected):
        raise UnauthorizedError()


async def require_intake_auth(
    x_auth: str | None = Header(None, alias="X-Auth"),
    settings: Settings = Depends(get_settings),
) -> None:
    """FastAPI dependency — 401 unless the X-Auth header carries the shared secret."""
    try:
        check_intake_auth(settings, x_auth)
    except UnauthorizedError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)


async def get_reconciler_service(
    store: RecordStore = Depends(get_record_store),
    chat: ChatPlatform = Depends(get_chat_platform),
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[ReconcilerService, None]:
    """Provides a ReconcilerService bound to the intake channel."""
    yield ReconcilerService(store, chat, settings.effective_intake_channel_id)


async def get_search_service(
    store: RecordStore = Depends(get_record_store),
    avatars: AvatarResolver = Depends(get_avatar_resolver),
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[SearchService, None]:
    yield SearchService(
        store,
        avatars,
        max_items=settings.search_max_items,
        max_timestamps=settings.search_max_timestamps,
    )


async def get_log_text_service(
    chat: ChatPlatform = Depends(get_chat_platform),
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[LogTextService, None]:
    yield LogTextService(chat, settings.logtext_channel_id)


async def get_password_service(
    chat: ChatPlatform = Depends(get_chat_platform),
    state: PasswordState = Depends(get_password_state),
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[PasswordService, None]:
    yield PasswordService(chat, state, settings.password_channel_id)
