"""Complaint-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Severity = Literal["Low", "Medium", "High", "Critical"]
ComplaintStatus = Literal["submitted", "in_review", "resolved", "rejected"]

PHONE_PATTERN = r"^\+?[0-9][0-9\- ()]{5,30}$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class _ComplaintPayload(BaseModel):
    """Fields shared by both submission channels.

    Accepts snake_case or camelCase keys. Unknown keys are rejected so an
    anonymous submission cannot smuggle identifying fields into the record.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    title: str | None = Field(None, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: str = Field(..., min_length=1, max_length=64)
    student_phone: str = Field(..., pattern=PHONE_PATTERN, description="Used only for replies")

    @property
    def effective_title(self) -> str:
        """Return the title, falling back to the opening of the description."""
        if self.title:
            return self.title
        first_line = self.description.splitlines()[0]
        return first_line[:80]


class AnonymousComplaintCreate(_ComplaintPayload):
    """Submission through the anonymous channel."""

    severity: Severity = "Medium"


class DepartmentComplaintCreate(_ComplaintPayload):
    """Submission addressed to a specific department."""

    department_id: int = Field(..., ge=1)
    urgency: Severity = "Medium"
    student_name: str = Field(..., min_length=1, max_length=200)
    student_email: str | None = Field(None, pattern=EMAIL_PATTERN)

    @field_validator("student_email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ComplaintCreated(BaseModel):
    """Identifier returned after a successful submission."""

    id: str
    channel: Literal["anonymous", "department"]
    status: ComplaintStatus = "submitted"


class StatusChange(BaseModel):
    """Request body for moving a complaint to a new status."""

    status: ComplaintStatus
    notes: str | None = Field(None, max_length=2000)
    client_seq: int | None = Field(None, ge=0, description="Monotonic per-client sequence")


class TransitionResponse(BaseModel):
    """Outcome of a status change; warnings never indicate failure."""

    complaint_id: str
    previous_status: ComplaintStatus
    status: ComplaintStatus
    notified: bool
    superseded: bool = False
    warnings: list[str] = Field(default_factory=list)


class AnonymousComplaintResponse(BaseModel):
    """Anonymous complaint as shown to admins. Carries no contact details."""

    id: str
    title: str
    description: str
    category: str
    severity: str
    status: ComplaintStatus
    notes: str | None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class DepartmentComplaintResponse(BaseModel):
    """Department complaint including the submitter's identity."""

    id: str
    title: str
    description: str
    department_id: int
    category: str
    urgency: str
    status: ComplaintStatus
    student_name: str
    student_phone: str
    student_email: str | None
    notes: str | None
    resolved_by: str | None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ComplaintTransitionResponse(BaseModel):
    """One entry of a complaint's audit trail."""

    from_status: ComplaintStatus
    to_status: ComplaintStatus
    actor_id: str
    notes: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
