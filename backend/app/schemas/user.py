from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer

from app.schemas.common import as_utc


class UserOut(BaseModel):
    """Client-facing user. Carries no password hash or session fields."""

    id: str
    name: str
    email: str
    created_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    updated_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        serialization_alias="updatedAt",
    )

    @field_serializer("created_at", "updated_at")
    def serialize_dt(self, dt: datetime | None) -> datetime | None:
        return as_utc(dt)

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """PATCH /auth/me body. Only these keys are mutable; anything else is rejected."""

    name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=128)

    model_config = ConfigDict(extra="forbid")
