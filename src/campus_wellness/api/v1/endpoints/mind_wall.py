# src/campus_wellness/api/v1/endpoints/mind_wall.py
"""Mind Wall endpoints."""

from fastapi import APIRouter, Query, status

from campus_wellness.schemas.mind_wall import (
    IssueCreate,
    IssueResponse,
    IssueStatus,
    IssueStatusChange,
    IssueVote,
    IssueVoteResponse,
)
from campus_wellness.services.mind_wall import MindWallService

from ..dependencies import AccessDep, FreshAccessDep, IdentityDep, SessionDep

router = APIRouter(prefix="/mind-wall", tags=["mind-wall"])


@router.get("/", response_model=list[IssueResponse])
async def list_issues(
    db: SessionDep,
    ctx: AccessDep,
    limit: int = Query(20, ge=1, le=100),
    before: int | None = Query(None, description="Return issues with an id below this one"),
    status_filter: IssueStatus | None = Query(None, alias="status"),
) -> list[IssueResponse]:
    """List the newest issues on the wall."""
    service = MindWallService(db)
    issues = service.list_issues(limit=limit, status=status_filter, before_id=before)
    return [service.to_response(issue, ctx) for issue in issues]


@router.post("/", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def raise_issue(
    issue_data: IssueCreate,
    db: SessionDep,
    identity: IdentityDep,
    ctx: AccessDep,
) -> IssueResponse:
    """Raise an issue, optionally without showing your name."""
    service = MindWallService(db)
    return service.to_response(service.raise_issue(issue_data, identity), ctx)


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(issue_id: int, db: SessionDep, ctx: AccessDep) -> IssueResponse:
    service = MindWallService(db)
    return service.to_response(service.get_issue(issue_id), ctx)


@router.post("/{issue_id}/vote", response_model=IssueVoteResponse)
async def vote_on_issue(
    issue_id: int,
    vote_data: IssueVote,
    db: SessionDep,
    ctx: AccessDep,
) -> IssueVoteResponse:
    """Cast, switch or clear the caller's vote on an issue."""
    counts = MindWallService(db).vote(
        issue_id, vote_data.direction, ctx, client_seq=vote_data.client_seq
    )
    return IssueVoteResponse(
        issue_id=counts.post_id,
        upvotes=counts.upvotes,
        downvotes=counts.downvotes,
        direction=counts.direction,
        changed=counts.changed,
        superseded=counts.superseded,
    )


@router.post("/{issue_id}/status", response_model=IssueResponse)
async def change_issue_status(
    issue_id: int,
    change: IssueStatusChange,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> IssueResponse:
    """Mark an issue in progress, resolved or closed (moderators only)."""
    service = MindWallService(db)
    return service.to_response(service.set_status(issue_id, change.status, ctx), ctx)


@router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_issue(issue_id: int, db: SessionDep, ctx: FreshAccessDep) -> None:
    """Remove an issue. Authors remove their own; moderators and admins any."""
    MindWallService(db).delete_issue(issue_id, ctx)
