"""Post and comment operations gated by the visibility filter."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from campus_wellness.core.errors import AuthorizationError, NotFoundError, ValidationError
from campus_wellness.core.security import Identity
from campus_wellness.core.settings import settings
from campus_wellness.db.time import as_utc
from campus_wellness.models import Post, PostComment
from campus_wellness.models.post import POST_TYPE_ACTIVITY, VISIBILITY_MODERATORS
from campus_wellness.repositories.department_repo import DepartmentRepository
from campus_wellness.repositories.post_repo import PostRepository
from campus_wellness.schemas.post import (
    CommentCreate,
    CommentResponse,
    PostCreate,
    PostResponse,
)
from campus_wellness.services.access import AccessContext
from campus_wellness.services.vote_ledger import VoteLedger
from campus_wellness.services.visibility import filter_visible, is_visible

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class PostService:
    """Creates, lists and removes community posts."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.repo = PostRepository(session)
        self.departments = DepartmentRepository(session)

    def create_post(self, data: PostCreate, identity: Identity, ctx: AccessContext) -> Post:
        """Persist a post written by ``identity``.

        A category that names an active department ties the post to it.
        Only admins and moderators may publish moderator-only posts.
        """
        if data.visibility == VISIBILITY_MODERATORS and not ctx.can_moderate:
            raise AuthorizationError("Only moderators can publish moderator-only posts")

        department = self.departments.match_category(data.category)
        max_participants = None
        if data.post_type == POST_TYPE_ACTIVITY:
            if data.activity_date is None:
                raise ValidationError(
                    "Invalid activity", {"activity_date": "Activities need a date"}
                )
            max_participants = data.max_participants or settings.default_max_participants

        post = self.repo.create(
            author_id=identity.user_id,
            author_name=None if data.is_anonymous else identity.name,
            is_anonymous=data.is_anonymous,
            content=data.content,
            post_type=data.post_type,
            category=data.category,
            department_id=department.id if department else None,
            visibility=data.visibility,
            activity_date=as_utc(data.activity_date) if data.activity_date else None,
            location=data.location,
            max_participants=max_participants,
        )
        self.session.commit()
        logger.info("Post %s created (%s, %s)", post.id, post.post_type, post.category)
        return post

    def get_visible(self, post_id: int, ctx: AccessContext) -> Post:
        """Return a post ``ctx`` may see; hidden posts look missing."""
        post = self.repo.get_by_id(post_id)
        if post is None or not is_visible(post, ctx, self.departments.category_index()):
            raise NotFoundError("Post not found")
        return post

    def list_visible(
        self,
        ctx: AccessContext,
        *,
        limit: int = 20,
        post_type: str | None = None,
        before_id: int | None = None,
    ) -> list[Post]:
        """Return the newest posts ``ctx`` may see."""
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        posts = self.repo.list_recent(limit=limit, post_type=post_type, before_id=before_id)
        return filter_visible(posts, ctx, self.departments.category_index())

    def delete_post(self, post_id: int, ctx: AccessContext) -> None:
        """Soft-delete a post; allowed for its author, moderators and admins."""
        post = self.get_visible(post_id, ctx)
        if post.author_id != ctx.user_id and not ctx.can_moderate:
            raise AuthorizationError("Not allowed to delete this post")
        if not self.repo.soft_delete(post_id):
            raise NotFoundError("Post not found")
        self.session.commit()
        logger.info("Post %s deleted by %s", post_id, ctx.user_id)

    # --- comments -------------------------------------------------------------------
    def add_comment(
        self, post_id: int, data: CommentCreate, identity: Identity, ctx: AccessContext
    ) -> PostComment:
        """Reply to a visible post."""
        self.get_visible(post_id, ctx)
        comment = self.repo.add_comment(
            post_id=post_id,
            author_id=identity.user_id,
            author_name=None if data.is_anonymous else identity.name,
            is_anonymous=data.is_anonymous,
            content=data.content,
        )
        self.session.commit()
        return comment

    def list_comments(self, post_id: int, ctx: AccessContext) -> list[PostComment]:
        """Return the comments of a visible post."""
        self.get_visible(post_id, ctx)
        return self.repo.list_comments(post_id)

    # --- presentation ---------------------------------------------------------------
    def to_response(self, post: Post, ctx: AccessContext) -> PostResponse:
        """Render a post for ``ctx``, hiding anonymous authors from non-moderators."""
        ledger = VoteLedger(self.session)
        response = PostResponse.model_validate(post)
        updates: dict[str, object] = {"my_vote": ledger.current_direction(post.id, ctx.user_id)}
        if post.is_anonymous and post.author_id != ctx.user_id and not ctx.can_moderate:
            updates["author_id"] = None
        if post.post_type == POST_TYPE_ACTIVITY:
            updates["participant_count"] = self.repo.count_participants(post.id)
        return response.model_copy(update=updates)

    @staticmethod
    def comment_response(comment: PostComment, ctx: AccessContext) -> CommentResponse:
        """Render a comment for ``ctx`` with the same anonymity rule as posts."""
        hide_author = (
            comment.is_anonymous and comment.author_id != ctx.user_id and not ctx.can_moderate
        )
        return CommentResponse(
            id=comment.id,
            post_id=comment.post_id,
            author_id=None if hide_author else comment.author_id,
            author_name=None if comment.is_anonymous else comment.author_name,
            is_anonymous=comment.is_anonymous,
            content=comment.content,
            created_at=comment.created_at,
        )
