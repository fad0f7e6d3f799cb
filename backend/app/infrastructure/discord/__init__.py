"""Discord infrastructure package."""

from .discord_client import DiscordClient
from .signature import verify_interaction_signature

__all__ = ["DiscordClient", "verify_interaction_signature"]
