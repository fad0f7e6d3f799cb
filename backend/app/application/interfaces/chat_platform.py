"""Abstract chat platform interface — port for the messaging adapter.

The application layer only talks to the chat platform (cards, plain
messages, interaction follow-ups) through this interface.
"""

from abc import ABC, abstractmethod

from app.domain.entities import Card, ChannelMessage


class ChatPlatform(ABC):
    """Port — what the application layer needs from the chat platform."""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        ...

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """True when credentials are configured and calls can be made."""
        ...

    @abstractmethod
    async def create_card(self, channel_id: str, card: Card) -> str:
        """Post a card and return its reference (the message id).

        Raises:
            ChatPlatformError: If the platform rejects the request.
        """
        ...

    @abstractmethod
    async def set_card_field(
        self, channel_id: str, card_reference: str, name: str, value: str
    ) -> None:
        """Replace the card field called ``name`` or append it when missing."""
        ...

    @abstractmethod
    async def send_text(self, channel_id: str, content: str) -> str:
        """Post a plain text message with mentions disabled; returns its id."""
        ...

    @abstractmethod
    async def send_file(self, channel_id: str, filename: str, content: bytes) -> str:
        """Post a single file attachment; returns the message id."""
        ...

    @abstractmethod
    async def list_messages(self, channel_id: str, limit: int = 50) -> list[ChannelMessage]:
        ...

    @abstractmethod
    async def edit_text(self, channel_id: str, message_id: str, content: str) -> None:
        ...

    @abstractmethod
    async def delete_message(self, channel_id: str, message_id: str) -> None:
        ...

    @abstractmethod
    async def bot_user_id(self) -> str:
        """Id of the account the adapter posts as."""
        ...

    @abstractmethod
    async def edit_interaction_response(
        self, interaction_token: str, *, content: str | None = None, card: Card | None = None
    ) -> None:
        """Fill in a deferred interaction response."""
        ...
