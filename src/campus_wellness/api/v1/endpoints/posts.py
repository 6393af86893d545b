# src/campus_wellness/api/v1/endpoints/posts.py
"""Post, comment and activity endpoints."""

from typing import Literal

from fastapi import APIRouter, Query, status

from campus_wellness.models import ActivityParticipant
from campus_wellness.schemas.post import (
    CommentCreate,
    CommentResponse,
    ParticipantResponse,
    ParticipationResponse,
    PostCreate,
    PostResponse,
)
from campus_wellness.services.activities import ActivityService, Participation
from campus_wellness.services.posts import PostService

from ..dependencies import AccessDep, FreshAccessDep, IdentityDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


def _participation(result: Participation) -> ParticipationResponse:
    return ParticipationResponse(
        post_id=result.post_id,
        joined=result.joined,
        participant_count=result.participant_count,
        max_participants=result.max_participants,
    )


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    db: SessionDep,
    ctx: AccessDep,
    limit: int = Query(20, ge=1, le=100, description="Maximum number of posts to return"),
    before: int | None = Query(None, description="Return posts with an id below this one"),
    post_type: Literal["concern", "activity"] | None = Query(None),
) -> list[PostResponse]:
    """List the newest posts the caller may see.

    Hidden posts are dropped from the page, so a page can be shorter than
    ``limit`` even when older posts exist.
    """
    service = PostService(db)
    posts = service.list_visible(ctx, limit=limit, post_type=post_type, before_id=before)
    return [service.to_response(post, ctx) for post in posts]


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    db: SessionDep,
    identity: IdentityDep,
    ctx: AccessDep,
) -> PostResponse:
    """Publish a concern or an activity."""
    service = PostService(db)
    post = service.create_post(post_data, identity, ctx)
    return service.to_response(post, ctx)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: SessionDep, ctx: AccessDep) -> PostResponse:
    """Get a post; posts hidden from the caller are reported as missing."""
    service = PostService(db)
    return service.to_response(service.get_visible(post_id, ctx), ctx)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, db: SessionDep, ctx: FreshAccessDep) -> None:
    """Remove a post. Authors remove their own; moderators and admins any."""
    PostService(db).delete_post(post_id, ctx)


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: int, db: SessionDep, ctx: AccessDep) -> list[CommentResponse]:
    service = PostService(db)
    return [service.comment_response(c, ctx) for c in service.list_comments(post_id, ctx)]


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: int,
    comment_data: CommentCreate,
    db: SessionDep,
    identity: IdentityDep,
    ctx: AccessDep,
) -> CommentResponse:
    """Reply to a post."""
    service = PostService(db)
    comment = service.add_comment(post_id, comment_data, identity, ctx)
    return service.comment_response(comment, ctx)


@router.post("/{post_id}/join", response_model=ParticipationResponse)
async def join_activity(
    post_id: int,
    db: SessionDep,
    identity: IdentityDep,
    ctx: AccessDep,
) -> ParticipationResponse:
    """Join an activity while it has room."""
    return _participation(ActivityService(db).join(post_id, identity, ctx))


@router.post("/{post_id}/leave", response_model=ParticipationResponse)
async def leave_activity(
    post_id: int,
    db: SessionDep,
    identity: IdentityDep,
    ctx: AccessDep,
) -> ParticipationResponse:
    """Leave an activity."""
    return _participation(ActivityService(db).leave(post_id, identity, ctx))


@router.get("/{post_id}/participants", response_model=list[ParticipantResponse])
async def list_participants(
    post_id: int, db: SessionDep, ctx: AccessDep
) -> list[ActivityParticipant]:
    """List the members of an activity."""
    return ActivityService(db).participants(post_id, ctx)
