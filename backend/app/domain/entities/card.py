"""Domain entities for chat cards (rendered messages with fields and buttons)."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class ButtonStyle(IntEnum):
    PRIMARY = 1
    SECONDARY = 2


@dataclass
class CardField:
    name: str
    value: str
    inline: bool = False


@dataclass
class CardButton:
    custom_id: str
    label: str
    style: ButtonStyle = ButtonStyle.PRIMARY


@dataclass
class Card:
    """Platform-neutral message card; the chat adapter maps it to an embed."""

    title: str
    description: str | None = None
    fields: list[CardField] = field(default_factory=list)
    buttons: list[CardButton] = field(default_factory=list)
    thumbnail_url: str | None = None
    timestamp: datetime | None = None


@dataclass
class ChannelMessage:
    """A message read back from a chat channel."""

    id: str
    author_id: str
    content: str
    created_at: datetime
