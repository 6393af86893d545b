"""Activity participation and the background cleanup of past activities.

Activities are posts with ``post_type == "activity"``. Members join up to the
activity's ``max_participants``; once its date has passed the activity is
soft-deleted by :class:`ActivityCleanupWorker`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_wellness.core.errors import ActivityFullError, ValidationError
from campus_wellness.core.security import Identity
from campus_wellness.core.settings import settings
from campus_wellness.db.session import SessionLocal
from campus_wellness.db.time import as_utc, utcnow
from campus_wellness.models import ActivityParticipant, Post
from campus_wellness.models.post import POST_TYPE_ACTIVITY
from campus_wellness.repositories.post_repo import PostRepository
from campus_wellness.services.access import AccessContext
from campus_wellness.services.posts import PostService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Participation:
    """Membership of one user in one activity after a join or leave."""

    post_id: int
    joined: bool
    participant_count: int
    max_participants: int


class ActivityService:
    """Join and leave activities without exceeding their capacity."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.repo = PostRepository(session)
        self.posts = PostService(session)

    def _load_activity(self, post_id: int, ctx: AccessContext) -> Post:
        post = self.posts.get_visible(post_id, ctx)
        if post.post_type != POST_TYPE_ACTIVITY:
            raise ValidationError("Not an activity", {"post_id": "Post is not an activity"})
        return post

    @staticmethod
    def _capacity(post: Post) -> int:
        return post.max_participants or settings.default_max_participants

    def join(self, post_id: int, identity: Identity, ctx: AccessContext) -> Participation:
        """Add the caller to an activity; joining twice is a no-op.

        Raises:
            ActivityFullError: The activity already has ``max_participants`` members.
            ValidationError: The post is not an activity or has already taken place.
        """
        post = self._load_activity(post_id, ctx)
        capacity = self._capacity(post)
        if post.activity_date is not None and as_utc(post.activity_date) < utcnow():
            raise ValidationError(
                "Activity is over", {"post_id": "Activity has already taken place"}
            )

        if self.repo.is_participant(post_id, identity.user_id):
            return self._result(post_id, capacity, joined=True)

        try:
            self.repo.add_participant(post_id, identity.user_id, identity.name)
            if self.repo.count_participants(post_id) > capacity:
                raise ActivityFullError(f"Activity is full ({capacity} participants)")
            self.session.commit()
        except IntegrityError:
            # Same user joined concurrently.
            self.session.rollback()
            return self._result(post_id, capacity, joined=True)
        except (ActivityFullError, SQLAlchemyError):
            self.session.rollback()
            raise

        logger.info("User %s joined activity %s", identity.user_id, post_id)
        return self._result(post_id, capacity, joined=True)

    def leave(self, post_id: int, identity: Identity, ctx: AccessContext) -> Participation:
        """Remove the caller from an activity; leaving twice is a no-op."""
        post = self._load_activity(post_id, ctx)
        removed = self.repo.remove_participant(post_id, identity.user_id)
        self.session.commit()
        if removed:
            logger.info("User %s left activity %s", identity.user_id, post_id)
        return self._result(post_id, self._capacity(post), joined=False)

    def participants(self, post_id: int, ctx: AccessContext) -> list[ActivityParticipant]:
        """Return the members of a visible activity."""
        self._load_activity(post_id, ctx)
        return self.repo.list_participants(post_id)

    def _result(self, post_id: int, capacity: int, *, joined: bool) -> Participation:
        return Participation(
            post_id=post_id,
            joined=joined,
            participant_count=self.repo.count_participants(post_id),
            max_participants=capacity,
        )


def cleanup_expired_activities(db: Session, now: datetime | None = None) -> list[int]:
    """Soft-delete activities dated before ``now`` and return their ids."""
    now = now or utcnow()
    try:
        ids = PostRepository(db).delete_expired_activities(now)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    if ids:
        logger.info("Removed %d past activities", len(ids))
    return ids


class ActivityCleanupWorker:
    """Periodically removes activities whose date has passed."""

    def __init__(
        self,
        interval_seconds: float | None = None,
        db_session: Session | None = None,
    ) -> None:
        """Initialize the cleanup worker.

        Args:
            interval_seconds: Seconds between sweeps. Defaults to the configured interval.
            db_session: Optional database session. If None, creates new sessions as needed.
        """
        if interval_seconds is None:
            interval_seconds = settings.activity_cleanup_interval_seconds
        self.interval_seconds = max(0.1, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self._db_session = db_session

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background cleanup loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background cleanup loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> list[int]:
        """Perform a single sweep."""
        if self._db_session is not None:
            return cleanup_expired_activities(self._db_session)
        return await asyncio.to_thread(self._sweep_with_new_session)

    @staticmethod
    def _sweep_with_new_session() -> list[int]:
        with SessionLocal() as db:
            return cleanup_expired_activities(db)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except SQLAlchemyError as exc:
                logger.warning("ActivityCleanupWorker failed to sweep: %s", exc)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                continue
