# src/campus_wellness/models/complaint.py
"""Complaint models for the anonymous and department channels."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from campus_wellness.db.session import Base
from campus_wellness.db.time import utcnow

STATUS_SUBMITTED = "submitted"
STATUS_IN_REVIEW = "in_review"
STATUS_RESOLVED = "resolved"
STATUS_REJECTED = "rejected"
COMPLAINT_STATUSES = (STATUS_SUBMITTED, STATUS_IN_REVIEW, STATUS_RESOLVED, STATUS_REJECTED)

CHANNEL_ANONYMOUS = "anonymous"
CHANNEL_DEPARTMENT = "department"

SEVERITY_LEVELS = ("Low", "Medium", "High", "Critical")

_STATUS_CHECK = "status IN ('submitted', 'in_review', 'resolved', 'rejected')"


class AnonymousComplaint(Base):
    """Complaint filed without any link to the submitter's identity.

    ``student_phone`` is kept only so the notifier can route replies; no read
    path returns it.
    """

    __tablename__ = "anonymous_complaint"
    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="ck_anonymous_complaint_status"),
        Index("ix_anonymous_complaint_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="Medium")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_SUBMITTED)
    student_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class DepartmentComplaint(Base):
    """Complaint addressed to a department; the submitter is identified."""

    __tablename__ = "department_complaint"
    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="ck_department_complaint_status"),
        Index("ix_department_complaint_department_id", "department_id"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    department_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("department.id"),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    urgency: Mapped[str] = mapped_column(String(16), nullable=False, default="Medium")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_SUBMITTED)

    student_user_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    student_name: Mapped[str] = mapped_column(Text, nullable=False)
    student_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    student_email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class ComplaintTransition(Base):
    """Audit row written for every committed status change."""

    __tablename__ = "complaint_transition"
    __table_args__ = (Index("ix_complaint_transition_complaint_id", "complaint_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # No foreign key: the id may point at either complaint table.
    complaint_id: Mapped[str] = mapped_column(String(40), nullable=False)
    from_status: Mapped[str] = mapped_column(String(16), nullable=False)
    to_status: Mapped[str] = mapped_column(String(16), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(128), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
