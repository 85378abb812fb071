from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer

from app.schemas.common import as_utc


def _camel(name: str, camel: str):
    return {
        "validation_alias": AliasChoices(name, camel),
        "serialization_alias": camel,
    }


class TaskCreate(BaseModel):
    description: str
    completed: bool = False
    priority: Optional[str] = None
    due_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("dueDate", "due_date")
    )

    # Unknown keys (including a client-supplied `owner`) are dropped.
    model_config = ConfigDict(extra="ignore")


class TaskUpdate(BaseModel):
    """PATCH /tasks/{id} body. Only these keys are mutable; anything else is rejected."""

    description: Optional[str] = None
    completed: Optional[bool] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("dueDate", "due_date")
    )

    model_config = ConfigDict(extra="forbid")


class TaskOut(BaseModel):
    id: str
    description: str
    completed: bool
    priority: str
    due_date: Optional[datetime] = Field(default=None, **_camel("due_date", "dueDate"))
    owner_id: str = Field(**_camel("owner_id", "owner"))
    created_at: datetime = Field(**_camel("created_at", "createdAt"))
    updated_at: datetime = Field(**_camel("updated_at", "updatedAt"))

    @field_serializer("due_date", "created_at", "updated_at")
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[datetime]:
        return as_utc(dt)

    model_config = ConfigDict(from_attributes=True)
