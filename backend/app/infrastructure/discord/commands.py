"""Slash command definitions and interaction wire constants."""

from typing import Any

# Interaction types
PING = 1
APPLICATION_COMMAND = 2
MESSAGE_COMPONENT = 3
MODAL_SUBMIT = 5

# Interaction callback types
PONG = 1
CHANNEL_MESSAGE = 4
DEFERRED_CHANNEL_MESSAGE = 5
MODAL = 9

EPHEMERAL = 1 << 6
MANAGE_GUILD = 1 << 5

SEARCH_COMMAND = "search"
CHANGE_PASSWORD_COMMAND = "change-password"

_STRING_OPTION = 3

SLASH_COMMANDS: list[dict[str, Any]] = [
    {
        "name": CHANGE_PASSWORD_COMMAND,
        "description": "Set the launcher password (stores it in the password channel message).",
        "options": [
            {
                "type": _STRING_OPTION,
                "name": "password",
                "description": "New password",
                "required": True,
            },
        ],
    },
    {
        "name": SEARCH_COMMAND,
        "description": "Search for player information through the database.",
        "options": [
            {
                "type": _STRING_OPTION,
                "name": "field",
                "description": "What to search",
                "required": True,
                "choices": [
                    {"name": "username", "value": "username"},
                    {"name": "deviceId", "value": "deviceid"},
                    {"name": "deviceUser", "value": "deviceuser"},
                    {"name": "location", "value": "location"},
                ],
            },
            {
                "type": _STRING_OPTION,
                "name": "value",
                "description": "Search value",
                "required": True,
            },
        ],
    },
]
