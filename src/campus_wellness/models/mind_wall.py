# src/campus_wellness/models/mind_wall.py
"""Mind Wall: short issues students raise for the community to vote on."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from campus_wellness.db.session import Base
from campus_wellness.db.time import utcnow

ISSUE_OPEN = "open"
ISSUE_IN_PROGRESS = "in_progress"
ISSUE_RESOLVED = "resolved"
ISSUE_CLOSED = "closed"
ISSUE_STATUSES = (ISSUE_OPEN, ISSUE_IN_PROGRESS, ISSUE_RESOLVED, ISSUE_CLOSED)


class MindWallIssue(Base):
    """An issue on the Mind Wall with its vote counters."""

    __tablename__ = "mind_wall_issue"
    __table_args__ = (
        CheckConstraint(
            "status IN ('open', 'in_progress', 'resolved', 'closed')",
            name="ck_mind_wall_issue_status",
        ),
        CheckConstraint(
            "severity IN ('Low', 'Medium', 'High', 'Critical')",
            name="ck_mind_wall_issue_severity",
        ),
        CheckConstraint(
            "upvotes >= 0 AND downvotes >= 0", name="ck_mind_wall_issue_counters"
        ),
        Index("ix_mind_wall_issue_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    author_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False, default="Low")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ISSUE_OPEN)

    upvotes: Mapped[int] = mapped_column(default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(default=0, nullable=False)

    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)


class MindWallVote(Base):
    """Per-user vote on a Mind Wall issue; same layout as ``post_vote``."""

    __tablename__ = "mind_wall_vote"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_mind_wall_vote_direction"),
        Index("ix_mind_wall_vote_issue_id", "issue_id"),
    )

    issue_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("mind_wall_issue.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)
