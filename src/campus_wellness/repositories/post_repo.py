"""Data access helpers for working with posts, votes and activity members."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from sqlalchemy import delete, func, insert, select, update

from campus_wellness.models import ActivityParticipant, Post, PostComment, PostVote
from campus_wellness.models.post import POST_TYPE_ACTIVITY

from .vote_sets import CounterField, VoteSetRepository

__all__ = ["PostRepository", "CounterField"]


class PostRepository(VoteSetRepository):
    """Thin wrapper around database access for post entities.

    Vote sets live in ``post_vote``; see :class:`VoteSetRepository`. None of
    these methods commit.
    """

    target = Post
    vote_model = PostVote
    target_key = "post_id"
    label = "Post"

    # --- documents ------------------------------------------------------------------
    def list_recent(
        self,
        *,
        limit: int,
        post_type: str | None = None,
        before_id: int | None = None,
    ) -> list[Post]:
        """Return non-deleted posts, newest first."""
        stmt = select(Post).where(Post.deleted.is_(False))
        if post_type is not None:
            stmt = stmt.where(Post.post_type == post_type)
        if before_id is not None:
            stmt = stmt.where(Post.id < before_id)
        stmt = stmt.order_by(Post.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def create(self, **fields: object) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        post = Post(**fields)
        self.session.add(post)
        self.session.flush()
        return post

    def relink_departments(self, departments: Mapping[str, int]) -> None:
        """Point every post at the department its category names, or at none.

        ``departments`` is a ``DepartmentRepository.category_index`` result.
        """
        self.session.execute(
            update(Post)
            .where(Post.department_id.is_not(None))
            .values(department_id=None)
            .execution_options(synchronize_session=False)
        )
        category = func.lower(func.trim(Post.category))
        for key, department_id in departments.items():
            self.session.execute(
                update(Post)
                .where(category == key)
                .values(department_id=department_id)
                .execution_options(synchronize_session=False)
            )

    def soft_delete(self, post_id: int) -> bool:
        """Flag a post as deleted; return False if it was already gone."""
        result = self.session.execute(
            update(Post)
            .where(Post.id == post_id, Post.deleted.is_(False))
            .values(deleted=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def delete_expired_activities(self, now: datetime) -> list[int]:
        """Soft-delete activities whose date lies before ``now``."""
        ids = list(
            self.session.execute(
                select(Post.id).where(
                    Post.post_type == POST_TYPE_ACTIVITY,
                    Post.deleted.is_(False),
                    Post.activity_date.is_not(None),
                    Post.activity_date < now,
                )
            ).scalars()
        )
        if ids:
            self.session.execute(
                update(Post)
                .where(Post.id.in_(ids))
                .values(deleted=True)
                .execution_options(synchronize_session=False)
            )
        return ids

    # --- comments -------------------------------------------------------------------
    def add_comment(self, **fields: object) -> PostComment:
        """Insert a comment and return it."""
        comment = PostComment(**fields)
        self.session.add(comment)
        self.session.flush()
        return comment

    def list_comments(self, post_id: int) -> list[PostComment]:
        """Return a post's comments in the order they were written."""
        return list(
            self.session.execute(
                select(PostComment)
                .where(PostComment.post_id == post_id)
                .order_by(PostComment.id)
            ).scalars()
        )

    # --- activity participants ------------------------------------------------------
    def is_participant(self, post_id: int, user_id: str) -> bool:
        """Return True when the user has joined the activity."""
        return self.session.get(ActivityParticipant, (post_id, user_id)) is not None

    def add_participant(self, post_id: int, user_id: str, display_name: str | None) -> None:
        """Insert a participant row; raises IntegrityError if already present."""
        self.session.execute(
            insert(ActivityParticipant).values(
                post_id=post_id,
                user_id=user_id,
                display_name=display_name,
            )
        )

    def remove_participant(self, post_id: int, user_id: str) -> bool:
        """Delete a participant row; return False if the user was not a member."""
        result = self.session.execute(
            delete(ActivityParticipant)
            .where(
                ActivityParticipant.post_id == post_id,
                ActivityParticipant.user_id == user_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def count_participants(self, post_id: int) -> int:
        """Return the number of users who joined the activity."""
        return int(
            self.session.execute(
                select(func.count()).where(ActivityParticipant.post_id == post_id)
            ).scalar_one()
        )

    def list_participants(self, post_id: int) -> list[ActivityParticipant]:
        """Return the activity's participants in join order."""
        return list(
            self.session.execute(
                select(ActivityParticipant)
                .where(ActivityParticipant.post_id == post_id)
                .order_by(ActivityParticipant.joined_at)
            ).scalars()
        )
