"""Builds the chat cards for intake events and search results."""

from datetime import datetime, timezone

from app.application.services.query_engine import is_truncation_marker
from app.domain.entities import (
    ButtonStyle,
    Card,
    CardButton,
    CardField,
    DeviceRecord,
    IdentityField,
    SearchSummary,
)

INTAKE_CARD_TITLE = "Player Database Log"
SEARCH_CARD_TITLE = "Search Results"
EMPTY_VALUE = "—"

ASK_USERNAME_BUTTON = "ask_user"
ASK_DISCORD_ID_BUTTON = "ask_id"

_IDENTITY_LABELS = {
    IdentityField.USERNAME: "Roblox Username",
    IdentityField.DISCORD_ID: "Discord ID",
}


def identity_label(identity_field: IdentityField) -> str:
    return _IDENTITY_LABELS[identity_field]


def submission_value(value: str, submitted_by: str) -> str:
    return f"**{value}** (submitted by {submitted_by})"


def build_intake_card(record: DeviceRecord) -> Card:
    """Intake card with device fields, approximate location and identity buttons."""
    fields = [
        CardField(name="Device User", value=record.device_user),
        CardField(name="Device ID", value=record.device_id),
    ]

    location = []
    if record.country:
        location.append(f"**Country:** {record.country}")
    if record.region:
        location.append(f"**Region:** {record.region}")
    if record.city:
        location.append(f"**City:** {record.city}")
    if location:
        fields.append(CardField(name="Approx. Location", value="\n".join(location)))

    return Card(
        title=INTAKE_CARD_TITLE,
        fields=fields,
        buttons=[
            CardButton(custom_id=ASK_USERNAME_BUTTON, label="User", style=ButtonStyle.PRIMARY),
            CardButton(custom_id=ASK_DISCORD_ID_BUTTON, label="ID", style=ButtonStyle.SECONDARY),
        ],
        timestamp=datetime.now(timezone.utc),
    )


def _block(items: list[str]) -> str:
    return "\n".join(items) if items else EMPTY_VALUE


def build_search_card(
    field: str,
    query: str,
    match_count: int,
    summary: SearchSummary,
    avatar_url: str | None = None,
) -> Card:
    timestamps = [t if is_truncation_marker(t) else f"• {t}" for t in summary.timestamps]
    return Card(
        title=SEARCH_CARD_TITLE,
        description=f"**Field:** `{field}`\n**Query:** `{query}`\n**Matches:** {match_count}",
        fields=[
            CardField(name="Device IDs", value=_block(summary.device_ids)),
            CardField(name="Device Users", value=_block(summary.device_users)),
            CardField(name="Locations", value=_block(summary.locations)),
            CardField(name="Timestamps", value=_block(timestamps)),
        ],
        thumbnail_url=avatar_url,
        timestamp=datetime.now(timezone.utc),
    )
