# src/campus_wellness/api/v1/endpoints/complaints.py
"""Complaint submission and review endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Query, status

from campus_wellness.models import AnonymousComplaint, ComplaintTransition, DepartmentComplaint
from campus_wellness.models.complaint import CHANNEL_ANONYMOUS, CHANNEL_DEPARTMENT
from campus_wellness.schemas.complaint import (
    AnonymousComplaintResponse,
    ComplaintCreated,
    ComplaintStatus,
    ComplaintTransitionResponse,
    DepartmentComplaintResponse,
    StatusChange,
    TransitionResponse,
)
from campus_wellness.services.complaints import ComplaintRouter

from ..dependencies import FreshAccessDep, IdentityDep, NotifierDep, SessionDep

router = APIRouter(prefix="/complaints", tags=["complaints"])

ComplaintPayload = Body(..., description="Channel-specific complaint fields")


@router.post(
    "/anonymous",
    response_model=ComplaintCreated,
    status_code=status.HTTP_201_CREATED,
)
async def submit_anonymous_complaint(
    db: SessionDep,
    notifier: NotifierDep,
    payload: dict[str, Any] = ComplaintPayload,
) -> ComplaintCreated:
    """Submit a complaint without identifying the student.

    No credentials are read; the phone number is used only for replies.
    """
    complaint_id = await ComplaintRouter(db, notifier).submit(CHANNEL_ANONYMOUS, payload)
    return ComplaintCreated(id=complaint_id, channel=CHANNEL_ANONYMOUS)


@router.post(
    "/department",
    response_model=ComplaintCreated,
    status_code=status.HTTP_201_CREATED,
)
async def submit_department_complaint(
    db: SessionDep,
    notifier: NotifierDep,
    identity: IdentityDep,
    payload: dict[str, Any] = ComplaintPayload,
) -> ComplaintCreated:
    """Submit a complaint to a department under the student's name."""
    complaint_id = await ComplaintRouter(db, notifier).submit(
        CHANNEL_DEPARTMENT, payload, submitter=identity
    )
    return ComplaintCreated(id=complaint_id, channel=CHANNEL_DEPARTMENT)


@router.get("/anonymous", response_model=list[AnonymousComplaintResponse])
async def list_anonymous_complaints(
    db: SessionDep,
    ctx: FreshAccessDep,
    status_filter: ComplaintStatus | None = Query(None, alias="status"),
) -> list[AnonymousComplaint]:
    """List anonymous complaints (admins only)."""
    return ComplaintRouter(db).list_anonymous(ctx, status=status_filter)


@router.get("/department", response_model=list[DepartmentComplaintResponse])
async def list_department_complaints(
    db: SessionDep,
    ctx: FreshAccessDep,
    status_filter: ComplaintStatus | None = Query(None, alias="status"),
) -> list[DepartmentComplaint]:
    """List department complaints: all for admins, their own for department heads."""
    return ComplaintRouter(db).list_department(ctx, status=status_filter)


@router.get(
    "/{complaint_id}",
    response_model=DepartmentComplaintResponse | AnonymousComplaintResponse,
)
async def get_complaint(
    complaint_id: str,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> DepartmentComplaintResponse | AnonymousComplaintResponse:
    """Get one complaint the caller may review."""
    complaint = ComplaintRouter(db).get_for(complaint_id, ctx)
    if isinstance(complaint, DepartmentComplaint):
        return DepartmentComplaintResponse.model_validate(complaint)
    return AnonymousComplaintResponse.model_validate(complaint)


@router.get("/{complaint_id}/history", response_model=list[ComplaintTransitionResponse])
async def get_complaint_history(
    complaint_id: str,
    db: SessionDep,
    ctx: FreshAccessDep,
) -> list[ComplaintTransition]:
    """Return the status changes of a complaint, oldest first."""
    return ComplaintRouter(db).history(complaint_id, ctx)


@router.post("/{complaint_id}/status", response_model=TransitionResponse)
async def change_complaint_status(
    complaint_id: str,
    change: StatusChange,
    db: SessionDep,
    notifier: NotifierDep,
    ctx: FreshAccessDep,
) -> TransitionResponse:
    """Move a complaint forward and text the student.

    A failed notification is reported in ``warnings``; the status change
    stands regardless.
    """
    result = await ComplaintRouter(db, notifier).transition(
        complaint_id,
        change.status,
        ctx,
        notes=change.notes,
        client_seq=change.client_seq,
    )
    return TransitionResponse(
        complaint_id=result.complaint_id,
        previous_status=result.previous_status,
        status=result.status,
        notified=result.notified,
        superseded=result.superseded,
        warnings=list(result.warnings),
    )
