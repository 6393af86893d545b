"""Schemas describing a resolved access context."""

from datetime import datetime

from pydantic import BaseModel


class DepartmentRefResponse(BaseModel):
    """The department a user heads."""

    id: int
    code: str
    name: str


class AccessContextResponse(BaseModel):
    """The caller's privileges for this session."""

    user_id: str
    email: str
    is_admin: bool
    is_moderator: bool
    department_head_of: DepartmentRefResponse | None
    authorities: list[str]
    resolved_at: datetime
