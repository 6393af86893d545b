"""Data access helpers for complaints in both channels."""
from __future__ import annotations

import secrets
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from campus_wellness.models import AnonymousComplaint, ComplaintTransition, DepartmentComplaint
from campus_wellness.models.complaint import CHANNEL_ANONYMOUS, CHANNEL_DEPARTMENT

__all__ = ["ComplaintRepository", "Complaint", "channel_of", "new_complaint_id"]

Complaint = AnonymousComplaint | DepartmentComplaint

_PREFIXES = {CHANNEL_ANONYMOUS: "anon_", CHANNEL_DEPARTMENT: "dept_"}
_MODELS: dict[str, type[AnonymousComplaint] | type[DepartmentComplaint]] = {
    CHANNEL_ANONYMOUS: AnonymousComplaint,
    CHANNEL_DEPARTMENT: DepartmentComplaint,
}


def new_complaint_id(channel: str) -> str:
    """Return a fresh complaint id whose prefix names its channel."""
    return f"{_PREFIXES[channel]}{secrets.token_hex(12)}"


def channel_of(complaint_id: str) -> str | None:
    """Return the channel encoded in a complaint id, or None if unknown."""
    for channel, prefix in _PREFIXES.items():
        if complaint_id.startswith(prefix):
            return channel
    return None


class ComplaintRepository:
    """Thin wrapper around database access for complaint entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, complaint_id: str) -> Complaint | None:
        """Return a complaint of either channel by id."""
        channel = channel_of(complaint_id)
        if channel is None:
            return None
        return self.session.get(_MODELS[channel], complaint_id)

    def create(self, channel: str, **fields: Any) -> Complaint:
        """Insert a complaint into the table for ``channel``."""
        complaint = _MODELS[channel](id=new_complaint_id(channel), **fields)
        self.session.add(complaint)
        self.session.flush()
        return complaint

    def list_anonymous(self, *, status: str | None = None) -> list[AnonymousComplaint]:
        """Return anonymous complaints, newest first."""
        stmt = select(AnonymousComplaint).order_by(AnonymousComplaint.created_at.desc())
        if status is not None:
            stmt = stmt.where(AnonymousComplaint.status == status)
        return list(self.session.execute(stmt).scalars())

    def list_department(
        self,
        *,
        department_id: int | None = None,
        status: str | None = None,
    ) -> list[DepartmentComplaint]:
        """Return department complaints, optionally for one department."""
        stmt = select(DepartmentComplaint).order_by(DepartmentComplaint.created_at.desc())
        if department_id is not None:
            stmt = stmt.where(DepartmentComplaint.department_id == department_id)
        if status is not None:
            stmt = stmt.where(DepartmentComplaint.status == status)
        return list(self.session.execute(stmt).scalars())

    def compare_and_set_status(
        self,
        complaint: Complaint,
        *,
        expected: str,
        new: str,
        **fields: Any,
    ) -> bool:
        """Move ``complaint`` to ``new`` only if it is still in ``expected``."""
        model = type(complaint)
        result = self.session.execute(
            update(model)
            .where(model.id == complaint.id, model.status == expected)
            .values(status=new, **fields)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def record_transition(
        self,
        complaint_id: str,
        *,
        from_status: str,
        to_status: str,
        actor_id: str,
        notes: str | None,
    ) -> ComplaintTransition:
        """Append an audit row for a committed status change."""
        entry = ComplaintTransition(
            complaint_id=complaint_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            notes=notes,
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def history(self, complaint_id: str) -> list[ComplaintTransition]:
        """Return the audit trail of a complaint, oldest first."""
        return list(
            self.session.execute(
                select(ComplaintTransition)
                .where(ComplaintTransition.complaint_id == complaint_id)
                .order_by(ComplaintTransition.id)
            ).scalars()
        )
