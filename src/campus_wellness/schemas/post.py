"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PostType = Literal["concern", "activity"]
Visibility = Literal["public", "moderators"]


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    content: str = Field(..., min_length=1, max_length=5000)
    post_type: PostType = "concern"
    category: str = Field(..., min_length=1, max_length=64)
    visibility: Visibility = "public"
    is_anonymous: bool = False
    activity_date: datetime | None = Field(None, description="When the activity takes place")
    location: str | None = Field(None, max_length=200)
    max_participants: int | None = Field(None, ge=1, le=1000)

    @model_validator(mode="after")
    def _activity_fields_only_on_activities(self) -> "PostCreate":
        if self.post_type != "activity" and (
            self.activity_date is not None
            or self.location is not None
            or self.max_participants is not None
        ):
            raise ValueError("activity fields require post_type 'activity'")
        return self


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    author_id: str | None
    author_name: str | None
    is_anonymous: bool
    content: str
    post_type: PostType
    category: str
    department_id: int | None
    visibility: Visibility
    activity_date: datetime | None
    location: str | None
    max_participants: int | None
    participant_count: int | None = None
    upvotes: int
    downvotes: int
    my_vote: Literal["up", "down"] | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentCreate(BaseModel):
    """Schema for replying to a post."""

    content: str = Field(..., min_length=1, max_length=2000)
    is_anonymous: bool = False


class CommentResponse(BaseModel):
    """Comment as returned by the API."""

    id: int
    post_id: int
    author_id: str | None
    author_name: str | None
    is_anonymous: bool
    content: str
    created_at: datetime


class ParticipantResponse(BaseModel):
    """Member of an activity."""

    user_id: str
    display_name: str | None
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParticipationResponse(BaseModel):
    """Outcome of joining or leaving an activity."""

    post_id: int
    joined: bool
    participant_count: int
    max_participants: int
