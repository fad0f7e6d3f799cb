from .record_store import RecordStore
from .chat_platform import ChatPlatform
from .avatar_resolver import AvatarResolver

__all__ = [
    "RecordStore",
    "ChatPlatform",
    "AvatarResolver",
]
