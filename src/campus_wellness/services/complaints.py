"""Complaint routing through the anonymous and department channels.

The anonymous channel stores no submitter identity; the phone number it
keeps is handed only to the notifier so replies can reach the student. The
department channel keeps the student's identity, visible to admins and to the
head of the addressed department.

Status moves forward only:

    submitted -> in_review -> resolved
    submitted -> resolved
    submitted | in_review -> rejected
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_wellness.core.errors import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    NotifierError,
    ValidationError,
)
from campus_wellness.core.security import Identity
from campus_wellness.db.time import utcnow
from campus_wellness.models import AnonymousComplaint, ComplaintTransition, DepartmentComplaint
from campus_wellness.models.complaint import (
    CHANNEL_ANONYMOUS,
    CHANNEL_DEPARTMENT,
    COMPLAINT_STATUSES,
    STATUS_IN_REVIEW,
    STATUS_REJECTED,
    STATUS_RESOLVED,
    STATUS_SUBMITTED,
)
from campus_wellness.repositories.complaint_repo import Complaint, ComplaintRepository
from campus_wellness.repositories.department_repo import DepartmentRepository
from campus_wellness.schemas.complaint import AnonymousComplaintCreate, DepartmentComplaintCreate
from campus_wellness.services.access import AccessContext
from campus_wellness.services.notifier import NotifierClient
from campus_wellness.services.sequencing import ActionSequencer

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_SUBMITTED: frozenset({STATUS_IN_REVIEW, STATUS_RESOLVED, STATUS_REJECTED}),
    STATUS_IN_REVIEW: frozenset({STATUS_RESOLVED, STATUS_REJECTED}),
    STATUS_RESOLVED: frozenset(),
    STATUS_REJECTED: frozenset(),
}
CLOSING_STATUSES = frozenset({STATUS_RESOLVED, STATUS_REJECTED})

_PAYLOAD_SCHEMAS: dict[str, type[BaseModel]] = {
    CHANNEL_ANONYMOUS: AnonymousComplaintCreate,
    CHANNEL_DEPARTMENT: DepartmentComplaintCreate,
}


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a committed (or superseded) status change."""

    complaint_id: str
    previous_status: str
    status: str
    notified: bool
    warnings: tuple[str, ...] = ()
    superseded: bool = False


def can_transition(current: str, requested: str) -> bool:
    """Return True when ``current -> requested`` is a forward edge."""
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def _parse_payload(channel: str, payload: Mapping[str, Any]) -> BaseModel:
    schema = _PAYLOAD_SCHEMAS.get(channel)
    if schema is None:
        raise ValidationError("Unknown complaint channel", {"channel": channel})
    try:
        return schema.model_validate(dict(payload))
    except SchemaValidationError as exc:
        names = {
            (info.alias or name): name for name, info in schema.model_fields.items()
        }
        errors: dict[str, str] = {}
        for error in exc.errors():
            key = str(error["loc"][0]) if error["loc"] else "payload"
            errors[names.get(key, key)] = error["msg"]
        raise ValidationError(f"Invalid {channel} complaint", errors) from exc


class ComplaintRouter:
    """Accepts complaints and drives their status lifecycle."""

    def __init__(self, session: Session, notifier: NotifierClient | None = None) -> None:
        self.session = session
        self.repo = ComplaintRepository(session)
        self.departments = DepartmentRepository(session)
        self.sequencer = ActionSequencer(session)
        self.notifier = notifier

    # --- submission -----------------------------------------------------------------
    async def submit(
        self,
        channel: str,
        payload: Mapping[str, Any],
        *,
        submitter: Identity | None = None,
    ) -> str:
        """Persist a complaint and return its id.

        Raises:
            ValidationError: Required fields for ``channel`` are missing or invalid.
        """
        data = _parse_payload(channel, payload)
        if isinstance(data, DepartmentComplaintCreate):
            return await self._submit_department(data, submitter)
        if isinstance(data, AnonymousComplaintCreate):
            return self._submit_anonymous(data)
        raise ValidationError("Unknown complaint channel", {"channel": channel})

    def _submit_anonymous(self, data: AnonymousComplaintCreate) -> str:
        complaint = self.repo.create(
            CHANNEL_ANONYMOUS,
            title=data.effective_title,
            description=data.description,
            category=data.category,
            severity=data.severity,
            student_phone=data.student_phone,
            status=STATUS_SUBMITTED,
        )
        self.session.commit()
        logger.info("Anonymous complaint %s submitted (%s)", complaint.id, data.category)
        return complaint.id

    async def _submit_department(
        self, data: DepartmentComplaintCreate, submitter: Identity | None
    ) -> str:
        department = self.departments.get(data.department_id)
        if department is None or not department.is_active:
            raise ValidationError(
                "Invalid department complaint",
                {"department_id": "Unknown or inactive department"},
            )

        complaint = self.repo.create(
            CHANNEL_DEPARTMENT,
            title=data.effective_title,
            description=data.description,
            department_id=department.id,
            category=data.category,
            urgency=data.urgency,
            student_user_id=submitter.user_id if submitter else None,
            student_name=data.student_name,
            student_phone=data.student_phone,
            student_email=data.student_email,
            status=STATUS_SUBMITTED,
        )
        self.session.commit()
        logger.info(
            "Department complaint %s submitted to %s", complaint.id, department.code
        )

        if department.head_phone_number:
            summary = f"New complaint for {department.name}: {complaint.title}"
            await self._notify(department.head_phone_number, summary, STATUS_SUBMITTED, None)
        return complaint.id

    # --- status lifecycle -----------------------------------------------------------
    async def transition(
        self,
        complaint_id: str,
        new_status: str,
        actor: AccessContext,
        *,
        notes: str | None = None,
        client_seq: int | None = None,
    ) -> TransitionResult:
        """Move a complaint forward and notify the student.

        The status change is committed before the notifier is called; a
        notifier failure is returned as a warning and never undoes it.

        Raises:
            NotFoundError: No complaint has this id.
            AuthorizationError: ``actor`` may not act on this complaint.
            InvalidTransitionError: The change is not a forward edge.
            ConflictError: The status changed since it was read.
        """
        if new_status not in COMPLAINT_STATUSES:
            raise ValidationError("Unknown complaint status", {"status": new_status})

        complaint = self.repo.get(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        self._authorize(complaint, actor)

        current = complaint.status
        if not can_transition(current, new_status):
            logger.warning(
                "Rejected complaint transition %s: %s -> %s by %s",
                complaint_id,
                current,
                new_status,
                actor.user_id,
            )
            raise InvalidTransitionError(current, new_status)

        now = utcnow()
        fields: dict[str, Any] = {"updated_at": now}
        if notes:
            fields["notes"] = notes
        if new_status in CLOSING_STATUSES:
            fields["resolved_at"] = now
            fields["resolved_by"] = actor.user_id

        try:
            if not self.sequencer.claim(actor.user_id, f"complaint:{complaint_id}", client_seq):
                self.session.rollback()
                return TransitionResult(
                    complaint_id=complaint_id,
                    previous_status=current,
                    status=current,
                    notified=False,
                    superseded=True,
                )
            if not self.repo.compare_and_set_status(
                complaint, expected=current, new=new_status, **fields
            ):
                raise ConflictError("Complaint status changed concurrently")
            self.repo.record_transition(
                complaint_id,
                from_status=current,
                to_status=new_status,
                actor_id=actor.user_id,
                notes=notes,
            )
            self.session.commit()
        except (ConflictError, SQLAlchemyError):
            self.session.rollback()
            raise

        logger.info(
            "Complaint %s moved %s -> %s by %s", complaint_id, current, new_status, actor.user_id
        )
        self.session.refresh(complaint)

        warning = await self._notify(
            complaint.student_phone,
            self._summary(complaint),
            new_status,
            notes,
        )
        return TransitionResult(
            complaint_id=complaint_id,
            previous_status=current,
            status=new_status,
            notified=warning is None,
            warnings=(warning,) if warning else (),
        )

    # --- reads ----------------------------------------------------------------------
    def get_for(self, complaint_id: str, ctx: AccessContext) -> Complaint:
        """Return a complaint if ``ctx`` may read it."""
        complaint = self.repo.get(complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        self._authorize(complaint, ctx)
        return complaint

    def list_anonymous(
        self, ctx: AccessContext, *, status: str | None = None
    ) -> list[AnonymousComplaint]:
        """Return anonymous complaints; admins only."""
        if not ctx.is_admin:
            raise AuthorizationError("Only admins can review anonymous complaints")
        return self.repo.list_anonymous(status=status)

    def list_department(
        self, ctx: AccessContext, *, status: str | None = None
    ) -> list[DepartmentComplaint]:
        """Return department complaints: all for admins, own department for heads."""
        if ctx.is_admin:
            return self.repo.list_department(status=status)
        if ctx.department_head_of is not None:
            return self.repo.list_department(
                department_id=ctx.department_head_of.id, status=status
            )
        raise AuthorizationError("Only admins and department heads can review complaints")

    def history(self, complaint_id: str, ctx: AccessContext) -> list[ComplaintTransition]:
        """Return the audit trail of a complaint ``ctx`` may read."""
        self.get_for(complaint_id, ctx)
        return self.repo.history(complaint_id)

    # --- helpers --------------------------------------------------------------------
    @staticmethod
    def _authorize(complaint: Complaint, actor: AccessContext) -> None:
        if actor.is_admin:
            return
        if isinstance(complaint, DepartmentComplaint) and actor.heads(complaint.department_id):
            return
        raise AuthorizationError("Not allowed to act on this complaint")

    @staticmethod
    def _summary(complaint: Complaint) -> str:
        return f"{complaint.title} ({complaint.category})"

    async def _notify(
        self, phone: str, summary: str, status: str, notes: str | None
    ) -> str | None:
        """Call the notifier once; return a warning message instead of raising."""
        if self.notifier is None:
            logger.warning("No notifier configured; status %s not delivered", status)
            return "Notification skipped: notifier unavailable"
        try:
            await self.notifier.notify(phone, summary, status, notes)
        except NotifierError as exc:
            logger.warning("Complaint notification failed: %s", exc)
            return f"Notification failed: {exc}"
        except Exception as exc:
            logger.exception("Unexpected notifier error")
            return f"Notification failed: {exc}"
        return None
