"""Department-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .complaint import EMAIL_PATTERN, PHONE_PATTERN


class DepartmentCreate(BaseModel):
    """Schema for creating a department."""

    code: str = Field(..., min_length=1, max_length=32, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    head_name: str | None = Field(None, max_length=200)
    head_email: str | None = Field(None, pattern=EMAIL_PATTERN)
    head_phone_number: str | None = Field(None, pattern=PHONE_PATTERN)


class DepartmentUpdate(BaseModel):
    """Partial update; reassigning the head changes who resolves as head."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    head_name: str | None = Field(None, max_length=200)
    head_email: str | None = Field(None, pattern=EMAIL_PATTERN)
    head_phone_number: str | None = Field(None, pattern=PHONE_PATTERN)
    is_active: bool | None = None


class DepartmentResponse(BaseModel):
    """Public view of a department, as listed on the complaint form."""

    id: int
    code: str
    name: str
    description: str | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class DepartmentAdminResponse(DepartmentResponse):
    """Admin view including head contact details."""

    head_name: str | None
    head_email: str | None
    head_phone_number: str | None
    created_at: datetime
    updated_at: datetime | None
