"""Moderator-management Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .complaint import EMAIL_PATTERN


class ModeratorCreate(BaseModel):
    """Schema for assigning a moderator."""

    user_id: str = Field(..., min_length=1, max_length=128)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    name: str | None = Field(None, max_length=200)


class ModeratorResponse(BaseModel):
    """Moderator assignment as returned to admins."""

    user_id: str
    email: str
    name: str | None
    is_active: bool
    assigned_at: datetime
    removed_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
