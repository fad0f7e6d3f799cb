"""In-memory fakes of the application ports, shared by unit and integration tests."""

from datetime import datetime, timedelta, timezone

from app.application.interfaces import AvatarResolver, ChatPlatform
from app.domain.entities import Card, CardField, ChannelMessage
from app.domain.exceptions import ChatPlatformError


class FakeChatPlatform(ChatPlatform):
    """Keeps posted cards and messages in dicts keyed by generated ids."""

    def __init__(self, bot_id: str = "bot-1", fail: bool = False):
        self._bot_id = bot_id
        self.fail = fail
        self.cards: dict[str, Card] = {}
        self.card_channels: dict[str, str] = {}
        self.messages: dict[str, ChannelMessage] = {}
        self.files: dict[str, tuple[str, bytes]] = {}
        self.texts: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.interaction_responses: list[dict] = []
        self._next_id = 1000

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    def _check(self) -> None:
        if self.fail:
            raise ChatPlatformError("fake", 500, "platform unavailable")

    def add_message(self, author_id: str, content: str, minutes_ago: int = 0) -> ChannelMessage:
        message = ChannelMessage(
            id=self._new_id(),
            author_id=author_id,
            content=content,
            created_at=datetime(2025, 1, 1, 12, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago),
        )
        self.messages[message.id] = message
        return message

    @property
    def platform_name(self) -> str:
        return "fake"

    @property
    def is_ready(self) -> bool:
        return True

    async def create_card(self, channel_id: str, card: Card) -> str:
        self._check()
        ref = self._new_id()
        self.cards[ref] = card
        self.card_channels[ref] = channel_id
        return ref

    async def set_card_field(self, channel_id: str, card_reference: str, name: str, value: str) -> None:
        self._check()
        card = self.cards.setdefault(card_reference, Card(title="Player Database Log"))
        for f in card.fields:
            if f.name == name:
                f.value = value
                return
        card.fields.append(CardField(name=name, value=value))

    async def send_text(self, channel_id: str, content: str) -> str:
        self._check()
        self.texts.append((channel_id, content))
        return self.add_message(self._bot_id, content).id

    async def send_file(self, channel_id: str, filename: str, content: bytes) -> str:
        self._check()
        message_id = self._new_id()
        self.files[message_id] = (filename, content)
        return message_id

    async def list_messages(self, channel_id: str, limit: int = 50) -> list[ChannelMessage]:
        self._check()
        return list(self.messages.values())[:limit]

    async def edit_text(self, channel_id: str, message_id: str, content: str) -> None:
        self._check()
        self.messages[message_id].content = content

    async def delete_message(self, channel_id: str, message_id: str) -> None:
        self._check()
        self.messages.pop(message_id, None)
        self.deleted.append(message_id)

    async def bot_user_id(self) -> str:
        return self._bot_id

    async def edit_interaction_response(
        self, interaction_token: str, *, content: str | None = None, card: Card | None = None
    ) -> None:
        self._check()
        self.interaction_responses.append({"token": interaction_token, "content": content, "card": card})


class FakeAvatarResolver(AvatarResolver):
    def __init__(self, url: str | None = "https://cdn.example/avatar.png"):
        self.url = url
        self.calls: list[str | None] = []

    async def resolve(self, username: str | None) -> str | None:
        self.calls.append(username)
        return self.url
