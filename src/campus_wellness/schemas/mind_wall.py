"""Mind Wall schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .complaint import Severity

IssueStatus = Literal["open", "in_progress", "resolved", "closed"]


class IssueCreate(BaseModel):
    """Schema for raising an issue on the Mind Wall."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: str = Field("General", min_length=1, max_length=64)
    severity: Severity = "Low"
    is_anonymous: bool = False

    model_config = ConfigDict(str_strip_whitespace=True)


class IssueStatusChange(BaseModel):
    """Moderator update of an issue's status."""

    status: IssueStatus


class IssueVote(BaseModel):
    """Cast, switch or clear a vote on an issue."""

    direction: Literal["up", "down", "clear"]
    client_seq: int | None = Field(None, ge=0)


class IssueResponse(BaseModel):
    """Issue as shown on the wall."""

    id: int
    author_id: str | None
    author_name: str | None
    is_anonymous: bool
    title: str
    description: str
    category: str
    severity: Severity
    status: IssueStatus
    upvotes: int
    downvotes: int
    my_vote: Literal["up", "down"] | None = None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None
    resolved_by: str | None

    model_config = ConfigDict(from_attributes=True)


class IssueVoteResponse(BaseModel):
    """Issue counters after a vote request."""

    issue_id: int
    upvotes: int
    downvotes: int
    direction: Literal["up", "down"] | None
    changed: bool
    superseded: bool = False
