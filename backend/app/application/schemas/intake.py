"""Pydantic DTOs for the launcher intake endpoint."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class IntakeRequest(BaseModel):
    """Body posted by the launcher.

    Required fields are checked by the reconciler, not here, so that a
    missing device id is reported as a 400 rather than a schema error.
    """

    mode: str | None = Field(None, examples=["embed", "logtext"])
    device_user: str | None = Field(None, alias="deviceUser", examples=["DESKTOP-USER"])
    device_id: str | None = Field(None, alias="deviceId", examples=["8F2C-11AB"])
    country: str | None = Field(None, examples=["US"])
    region: str | None = Field(None, examples=["CA"])
    city: str | None = None

    # logtext mode
    text: str | None = None
    content_type: str | None = Field(None, alias="contentType", examples=["text/plain"])
    channel_id: str | None = Field(None, alias="channelId")

    model_config = {"populate_by_name": True}

    @field_validator("device_user", "device_id", "country", "region", "city", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        """Launchers may send numeric ids; store them as their string form."""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @property
    def is_logtext(self) -> bool:
        return (self.mode or "").strip().lower() == "logtext"


class IntakeResponse(BaseModel):
    ok: bool = True
    mode: str = "embed"
    card_reference: str | None = Field(None, serialization_alias="cardReference")
    sent_as: str | None = Field(None, serialization_alias="sentAs")
    name: str | None = None
