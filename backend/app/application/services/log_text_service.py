"""Posts raw launcher log text to a channel, as a message or a file when too long."""

import logging
from dataclasses import dataclass

from app.application.interfaces import ChatPlatform
from app.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


@dataclass
class LogTextResult:
    sent_as: str  # "message" | "file"
    message_id: str
    name: str | None = None


class LogTextService:
    def __init__(self, chat: ChatPlatform, default_channel_id: str):
        self._chat = chat
        self._default_channel_id = default_channel_id

    async def post(
        self,
        text: str | None,
        content_type: str | None = None,
        channel_id: str | None = None,
    ) -> LogTextResult:
        target = channel_id or self._default_channel_id
        is_json = "json" in (content_type or "").lower()
        clean_text = text if isinstance(text, str) else ""
        payload = f"```json\n{clean_text}\n```" if is_json else clean_text

        if not clean_text:
            raise ValidationError("Empty text payload", fields=["text"])

        if len(payload) <= MAX_MESSAGE_LENGTH:
            message_id = await self._chat.send_text(target, payload)
            return LogTextResult(sent_as="message", message_id=message_id)

        name = "log.json" if is_json else "log.txt"
        message_id = await self._chat.send_file(target, name, clean_text.encode("utf-8"))
        logger.info("Log text too long (%d chars), sent as %s", len(payload), name)
        return LogTextResult(sent_as="file", message_id=message_id, name=name)
