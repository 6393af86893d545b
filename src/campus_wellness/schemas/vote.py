"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting, switching or clearing a vote."""

    post_id: int
    direction: Literal["up", "down", "clear"] = Field(
        ..., description="up, down, or clear to withdraw the vote"
    )
    client_seq: int | None = Field(
        None,
        ge=0,
        description="Monotonic per-client counter; stale requests are discarded",
    )


class VoteCountsResponse(BaseModel):
    """Post counters after a vote request."""

    post_id: int
    upvotes: int
    downvotes: int
    direction: Literal["up", "down"] | None
    changed: bool
    superseded: bool = False


class MyVoteResponse(BaseModel):
    """The caller's current vote on a post."""

    post_id: int
    direction: Literal["up", "down"] | None
