"""Tests for activity participation and cleanup."""

import asyncio
from datetime import timedelta

import pytest

from campus_wellness.core.errors import ActivityFullError, NotFoundError, ValidationError
from campus_wellness.core.security import Identity
from campus_wellness.db.time import utcnow
from campus_wellness.models import Post
from campus_wellness.services.access import AccessContext
from campus_wellness.services.activities import (
    ActivityCleanupWorker,
    ActivityService,
    cleanup_expired_activities,
)


def _member(index: int) -> tuple[Identity, AccessContext]:
    user_id = f"member-{index}"
    email = f"member{index}@campus.edu"
    return Identity(user_id=user_id, email=email, name=f"Member {index}"), AccessContext(
        user_id=user_id, email=email
    )


@pytest.fixture()
def activity(make_post) -> Post:
    return make_post(post_type="activity", category="sports", max_participants=2)


def test_join_and_leave(db_session, activity) -> None:
    service = ActivityService(db_session)
    identity, ctx = _member(1)

    joined = service.join(activity.id, identity, ctx)
    assert joined.joined and joined.participant_count == 1
    assert joined.max_participants == 2
    assert [p.user_id for p in service.participants(activity.id, ctx)] == ["member-1"]

    left = service.leave(activity.id, identity, ctx)
    assert not left.joined and left.participant_count == 0


def test_joining_twice_is_a_no_op(db_session, activity) -> None:
    service = ActivityService(db_session)
    identity, ctx = _member(1)

    service.join(activity.id, identity, ctx)
    again = service.join(activity.id, identity, ctx)

    assert again.participant_count == 1


def test_full_activity_refuses_new_members(db_session, activity) -> None:
    service = ActivityService(db_session)
    for index in (1, 2):
        service.join(activity.id, *_member(index))

    with pytest.raises(ActivityFullError):
        service.join(activity.id, *_member(3))

    assert service.repo.count_participants(activity.id) == 2


def test_default_capacity_applies(db_session, make_post) -> None:
    post = make_post(post_type="activity", max_participants=None)

    result = ActivityService(db_session).join(post.id, *_member(1))

    assert result.max_participants == 10


def test_past_activity_cannot_be_joined(db_session, make_post) -> None:
    post = make_post(post_type="activity", activity_date=utcnow() - timedelta(hours=1))

    with pytest.raises(ValidationError):
        ActivityService(db_session).join(post.id, *_member(1))


def test_concerns_are_not_joinable(db_session, test_post) -> None:
    with pytest.raises(ValidationError):
        ActivityService(db_session).join(test_post.id, *_member(1))


def test_hidden_activity_looks_missing(db_session, make_post) -> None:
    post = make_post(post_type="activity", visibility="moderators")

    with pytest.raises(NotFoundError):
        ActivityService(db_session).join(post.id, *_member(1))


def test_cleanup_removes_only_past_activities(db_session, make_post) -> None:
    past = make_post(post_type="activity", activity_date=utcnow() - timedelta(days=1))
    future = make_post(post_type="activity", activity_date=utcnow() + timedelta(days=1))
    concern = make_post()

    removed = cleanup_expired_activities(db_session)

    assert removed == [past.id]
    db_session.expire_all()
    assert db_session.get(Post, past.id).deleted
    assert not db_session.get(Post, future.id).deleted
    assert not db_session.get(Post, concern.id).deleted


@pytest.mark.asyncio
async def test_worker_sweeps_and_stops(db_session, make_post) -> None:
    past = make_post(post_type="activity", activity_date=utcnow() - timedelta(days=2))
    worker = ActivityCleanupWorker(interval_seconds=0.1, db_session=db_session)

    await worker.start()
    assert worker.running
    await asyncio.sleep(0.05)
    await worker.stop()

    assert not worker.running
    db_session.expire_all()
    assert db_session.get(Post, past.id).deleted


@pytest.mark.asyncio
async def test_run_once_returns_removed_ids(db_session, make_post) -> None:
    past = make_post(post_type="activity", activity_date=utcnow() - timedelta(days=2))

    removed = await ActivityCleanupWorker(db_session=db_session).run_once()

    assert removed == [past.id]
