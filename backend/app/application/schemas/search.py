"""Pydantic DTOs for record search."""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

SearchValue = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SearchRequest(BaseModel):
    field: str = Field("any", examples=["username", "deviceid", "deviceuser", "location"])
    value: SearchValue = Field(..., examples=["bob"])


class SearchSummarySchema(BaseModel):
    device_ids: list[str] = Field(default_factory=list, serialization_alias="deviceIds")
    device_users: list[str] = Field(default_factory=list, serialization_alias="deviceUsers")
    timestamps: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    avatar_name: str | None = Field(None, serialization_alias="avatarName")

    model_config = {"from_attributes": True}


class SearchResponse(BaseModel):
    field: str
    query: str
    matches: int
    summary: SearchSummarySchema | None = None
    avatar_url: str | None = Field(None, serialization_alias="avatarUrl")
