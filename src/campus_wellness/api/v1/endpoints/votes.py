# src/campus_wellness/api/v1/endpoints/votes.py
"""Vote-related endpoints."""

from fastapi import APIRouter

from campus_wellness.schemas.vote import MyVoteResponse, VoteCountsResponse, VoteCreate
from campus_wellness.services.posts import PostService
from campus_wellness.services.vote_ledger import VoteLedger, apply_vote_with_retry

from ..dependencies import AccessDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("/", response_model=VoteCountsResponse)
async def cast_vote(
    vote_data: VoteCreate,
    db: SessionDep,
    ctx: AccessDep,
) -> VoteCountsResponse:
    """Cast, switch or clear the caller's vote on a post.

    Repeating the current direction changes nothing. A request carrying a
    ``client_seq`` older than one already applied is discarded and reported
    as ``superseded``.
    """
    counts = apply_vote_with_retry(
        VoteLedger(db),
        vote_data.post_id,
        ctx.user_id,
        vote_data.direction,
        ctx=ctx,
        client_seq=vote_data.client_seq,
    )
    return VoteCountsResponse(
        post_id=counts.post_id,
        upvotes=counts.upvotes,
        downvotes=counts.downvotes,
        direction=counts.direction,
        changed=counts.changed,
        superseded=counts.superseded,
    )


@router.get("/{post_id}", response_model=MyVoteResponse)
async def get_my_vote(post_id: int, db: SessionDep, ctx: AccessDep) -> MyVoteResponse:
    """Return the caller's current vote on a post."""
    PostService(db).get_visible(post_id, ctx)
    return MyVoteResponse(
        post_id=post_id,
        direction=VoteLedger(db).current_direction(post_id, ctx.user_id),
    )
