"""Launcher password kept in a single bot message in the password channel.

``plan_password_sync`` is a pure function of the desired password and the
messages currently in the channel; ``PasswordService`` applies the plan
and ``PasswordSyncWorker`` re-applies it periodically.
"""

import asyncio
import logging
import re
from dataclasses import dataclass

from app.application.interfaces import ChatPlatform
from app.domain.entities import ChannelMessage
from app.domain.exceptions import ChatPlatformError

logger = logging.getLogger(__name__)

PASSWORD_PREFIX = "GUI PASSWORD:"
_BACKTICKED = re.compile(r"`([^`]+)`")


@dataclass
class PasswordState:
    """The password the bot believes is current; shared by the app's services."""

    current: str


@dataclass
class SyncAction:
    kind: str  # "create" | "edit" | "delete"
    message_id: str | None = None
    content: str | None = None


def format_password_message(password: str) -> str:
    return f"{PASSWORD_PREFIX} `{password}`"


def parse_password(content: str) -> str:
    match = _BACKTICKED.search(content)
    if match:
        return match.group(1)
    return content[len(PASSWORD_PREFIX):].strip().strip("`")


def _password_messages(messages: list[ChannelMessage], bot_user_id: str) -> list[ChannelMessage]:
    return [
        m for m in messages
        if m.author_id == bot_user_id and m.content.startswith(PASSWORD_PREFIX)
    ]


def plan_password_sync(
    desired: str, messages: list[ChannelMessage], bot_user_id: str
) -> list[SyncAction]:
    """Actions that leave exactly one bot password message showing ``desired``.

    The newest existing message is kept; older duplicates are deleted.
    """
    desired_content = format_password_message(desired)
    own = _password_messages(messages, bot_user_id)
    if not own:
        return [SyncAction(kind="create", content=desired_content)]

    own.sort(key=lambda m: m.created_at, reverse=True)
    keeper, *duplicates = own
    actions = [SyncAction(kind="delete", message_id=m.id) for m in duplicates]
    if keeper.content != desired_content:
        actions.append(SyncAction(kind="edit", message_id=keeper.id, content=desired_content))
    return actions


class PasswordService:
    """Reads, changes and reconciles the password message."""

    def __init__(self, chat: ChatPlatform, state: PasswordState, channel_id: str):
        self._chat = chat
        self._state = state
        self._channel_id = channel_id

    @property
    def current(self) -> str:
        return self._state.current

    async def sync(self) -> list[SyncAction]:
        """Apply the reconciliation plan; individual action failures are logged."""
        messages = await self._chat.list_messages(self._channel_id, limit=50)
        bot_id = await self._chat.bot_user_id()
        actions = plan_password_sync(self._state.current, messages, bot_id)

        for action in actions:
            try:
                if action.kind == "create":
                    await self._chat.send_text(self._channel_id, action.content or "")
                elif action.kind == "edit":
                    await self._chat.edit_text(self._channel_id, action.message_id, action.content or "")
                elif action.kind == "delete":
                    await self._chat.delete_message(self._channel_id, action.message_id)
            except ChatPlatformError as e:
                logger.warning("Password sync %s failed: %s", action.kind, e)
        return actions

    async def read_password(self) -> str:
        """Read the password back from the channel, adopting it as current."""
        messages = await self._chat.list_messages(self._channel_id, limit=50)
        bot_id = await self._chat.bot_user_id()
        own = _password_messages(messages, bot_id)
        if not own:
            await self.sync()
            return self._state.current

        newest = max(own, key=lambda m: m.created_at)
        self._state.current = parse_password(newest.content)
        return self._state.current

    async def change_password(self, password: str) -> None:
        self._state.current = password
        try:
            await self.sync()
        except ChatPlatformError as e:
            logger.warning("Password changed but channel sync failed: %s", e)


class PasswordSyncWorker:
    """Asyncio task that re-applies the password plan every ``interval`` seconds."""

    def __init__(self, service: PasswordService, interval: float = 120.0) -> None:
        self._service = service
        self._interval = interval
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("PasswordSyncWorker started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("PasswordSyncWorker stopped")

    async def _loop(self) -> None:
        while self._running:
            try:
                await self._service.sync()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Password sync error")

            await asyncio.sleep(self._interval)
