"""Abstract avatar resolver interface — optional search enrichment."""

from abc import ABC, abstractmethod


class AvatarResolver(ABC):
    """Port — resolves a display name to an avatar image URL."""

    @abstractmethod
    async def resolve(self, username: str | None) -> str | None:
        """Return an image URL, or None when the lookup fails for any reason.

        Implementations must never raise; a failed lookup only means the
        search card is rendered without a thumbnail.
        """
        ...
