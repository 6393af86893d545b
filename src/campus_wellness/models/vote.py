# src/campus_wellness/models/vote.py
"""Models capturing voting interactions on posts."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_wellness.db.session import Base

VOTE_UP = 1
VOTE_DOWN = -1


class PostVote(Base):
    """Per-user vote on a post.

    The set of rows with direction 1 is the post's ``upvoted_by`` set and the
    rows with direction -1 its ``downvoted_by`` set.
    """

    __tablename__ = "post_vote"
    __table_args__ = (
        CheckConstraint("direction IN (1, -1)", name="ck_post_vote_direction"),
        Index("ix_post_vote_post_id", "post_id"),
    )

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key: one row per (post, user), so a user can never
    # sit in both directional sets.
    voter_user_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # 1 = upvote, -1 = downvote.
    direction: Mapped[int] = mapped_column(SmallInteger, nullable=False)
