# src/campus_wellness/api/v1/endpoints/moderators.py
"""Moderator management endpoints (admins only)."""

from fastapi import APIRouter, Query, status

from campus_wellness.models import ModeratorRecord
from campus_wellness.schemas.moderator import ModeratorCreate, ModeratorResponse
from campus_wellness.services.directory import DirectoryService

from ..dependencies import FreshAccessDep, SessionDep

router = APIRouter(prefix="/moderators", tags=["moderators"])


@router.get("/", response_model=list[ModeratorResponse])
async def list_moderators(
    db: SessionDep,
    ctx: FreshAccessDep,
    include_inactive: bool = Query(False),
) -> list[ModeratorRecord]:
    """List moderators."""
    return DirectoryService(db).list_moderators(ctx, include_inactive=include_inactive)


@router.post("/", response_model=ModeratorResponse, status_code=status.HTTP_201_CREATED)
async def grant_moderator(
    moderator_data: ModeratorCreate,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> ModeratorRecord:
    """Make a user a moderator. Their cached sessions are dropped."""
    return DirectoryService(db).grant_moderator(moderator_data, ctx)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_moderator(user_id: str, db: SessionDep, ctx: FreshAccessDep) -> None:
    """Revoke a moderator assignment."""
    DirectoryService(db).revoke_moderator(user_id, ctx)
