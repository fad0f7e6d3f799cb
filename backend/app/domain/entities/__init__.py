from .device_record import (
    DeviceRecord,
    IdentityField,
    RecordDatabase,
    RecordPatch,
)
from .search import SearchField, SearchSummary
from .card import ButtonStyle, Card, CardButton, CardField, ChannelMessage

__all__ = [
    "DeviceRecord",
    "IdentityField",
    "RecordDatabase",
    "RecordPatch",
    "SearchField",
    "SearchSummary",
    "ButtonStyle",
    "Card",
    "CardButton",
    "CardField",
    "ChannelMessage",
]
