# src/campus_wellness/models/post.py
"""SQLAlchemy models for posts and related attributes."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
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

POST_TYPE_CONCERN = "concern"
POST_TYPE_ACTIVITY = "activity"
POST_TYPES = (POST_TYPE_CONCERN, POST_TYPE_ACTIVITY)

VISIBILITY_PUBLIC = "public"
VISIBILITY_MODERATORS = "moderators"
VISIBILITIES = (VISIBILITY_PUBLIC, VISIBILITY_MODERATORS)


class Post(Base):
    """Community content item: a concern or an activity."""

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("post_type IN ('concern', 'activity')", name="ck_post_type"),
        CheckConstraint("visibility IN ('public', 'moderators')", name="ck_post_visibility"),
        CheckConstraint("upvotes >= 0 AND downvotes >= 0", name="ck_post_counters"),
        Index("ix_post_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Kept even for anonymous posts so authors can delete their own content.
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    author_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_type: Mapped[str] = mapped_column(String(16), nullable=False, default=POST_TYPE_CONCERN)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    # Set when the category names a department; scopes activity visibility.
    department_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("department.id"),
        nullable=True,
    )
    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=VISIBILITY_PUBLIC
    )

    # Activity-only attributes.
    activity_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Aggregates over post_vote; only ever changed by SQL-side increments.
    upvotes: Mapped[int] = mapped_column(default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(default=0, nullable=False)

    deleted: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class PostComment(Base):
    """Reply attached to a post."""

    __tablename__ = "post_comment"
    __table_args__ = (Index("ix_post_comment_post_id", "post_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    author_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ActivityParticipant(Base):
    """Membership of a user in an activity post."""

    __tablename__ = "activity_participant"

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
