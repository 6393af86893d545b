"""Tests for admin management of departments and moderators."""

import pytest

from campus_wellness.core.errors import AuthorizationError, ConflictError, NotFoundError
from campus_wellness.schemas.department import DepartmentCreate, DepartmentUpdate
from campus_wellness.schemas.moderator import ModeratorCreate
from campus_wellness.services.access import AccessContext, AccessContextCache
from campus_wellness.services.directory import DirectoryService

from .conftest import HEAD_EMAIL, HEAD_ID


@pytest.fixture()
def cache() -> AccessContextCache:
    return AccessContextCache(max_age_seconds=300)


@pytest.fixture()
def directory(db_session, cache) -> DirectoryService:
    return DirectoryService(db_session, cache)


def test_admin_creates_department(directory, admin_ctx) -> None:
    department = directory.create_department(
        DepartmentCreate(code="LAW", name="Law School", head_email="Dean@Campus.edu"),
        admin_ctx,
    )

    assert department.id is not None
    assert department.head_email == "dean@campus.edu"
    assert [d.code for d in directory.list_departments(admin_ctx)] == ["LAW"]


def test_duplicate_code_conflicts(directory, admin_ctx, department) -> None:
    with pytest.raises(ConflictError):
        directory.create_department(DepartmentCreate(code="cse", name="Again"), admin_ctx)


def test_non_admins_cannot_manage_departments(directory, head_ctx, department) -> None:
    with pytest.raises(AuthorizationError):
        directory.create_department(DepartmentCreate(code="X", name="X"), head_ctx)
    with pytest.raises(AuthorizationError):
        directory.update_department(department.id, DepartmentUpdate(name="CS"), head_ctx)
    with pytest.raises(AuthorizationError):
        directory.list_departments(head_ctx, include_inactive=True)


def test_head_reassignment_drops_cached_contexts(
    directory, cache, admin_ctx, head_ctx, department
) -> None:
    cache.put("head-session", head_ctx)
    cache.put("new-head-session", AccessContext(user_id="new", email="new.head@campus.edu"))

    directory.update_department(
        department.id, DepartmentUpdate(head_email="new.head@campus.edu"), admin_ctx
    )

    assert cache.get("head-session") is None
    assert cache.get("new-head-session") is None
    assert department.head_email == "new.head@campus.edu"


def test_deactivation_hides_department(directory, cache, admin_ctx, head_ctx, department) -> None:
    cache.put("head-session", head_ctx)

    directory.deactivate_department(department.id, admin_ctx)

    assert directory.list_departments(admin_ctx) == []
    assert len(directory.list_departments(admin_ctx, include_inactive=True)) == 1
    assert cache.get("head-session") is None


def test_unrelated_update_keeps_cached_contexts(
    directory, cache, admin_ctx, head_ctx, department
) -> None:
    cache.put("head-session", head_ctx)

    directory.update_department(department.id, DepartmentUpdate(description="CS"), admin_ctx)

    assert cache.get("head-session") is head_ctx


def test_update_missing_department(directory, admin_ctx) -> None:
    with pytest.raises(NotFoundError):
        directory.update_department(999, DepartmentUpdate(name="Nope"), admin_ctx)


def test_grant_and_revoke_moderator(directory, cache, admin_ctx) -> None:
    cache.put("s", AccessContext(user_id=HEAD_ID, email=HEAD_EMAIL))

    record = directory.grant_moderator(
        ModeratorCreate(user_id=HEAD_ID, email=HEAD_EMAIL, name="Hana"), admin_ctx
    )
    assert record.is_active
    assert cache.get("s") is None
    assert [m.user_id for m in directory.list_moderators(admin_ctx)] == [HEAD_ID]

    cache.put("s", AccessContext(user_id=HEAD_ID, email=HEAD_EMAIL, is_moderator=True))
    directory.revoke_moderator(HEAD_ID, admin_ctx)

    assert cache.get("s") is None
    assert directory.list_moderators(admin_ctx) == []
    inactive = directory.list_moderators(admin_ctx, include_inactive=True)
    assert [(m.user_id, m.is_active) for m in inactive] == [(HEAD_ID, False)]


def test_regranting_reactivates(directory, admin_ctx) -> None:
    data = ModeratorCreate(user_id="m", email="m@campus.edu")
    directory.grant_moderator(data, admin_ctx)
    directory.revoke_moderator("m", admin_ctx)

    record = directory.grant_moderator(data, admin_ctx)

    assert record.is_active
    assert record.removed_at is None


def test_revoking_unknown_moderator(directory, admin_ctx) -> None:
    with pytest.raises(NotFoundError):
        directory.revoke_moderator("nobody", admin_ctx)


def test_moderators_cannot_grant_moderators(directory, moderator_ctx) -> None:
    with pytest.raises(AuthorizationError):
        directory.grant_moderator(
            ModeratorCreate(user_id="x", email="x@campus.edu"), moderator_ctx
        )


def test_new_department_claims_existing_posts(directory, make_post, admin_ctx) -> None:
    activity = make_post(post_type="activity", category="law school")
    concern = make_post(category="parking")

    department = directory.create_department(
        DepartmentCreate(code="LAW", name="Law School"), admin_ctx
    )

    assert activity.department_id == department.id
    assert concern.department_id is None


def test_deactivation_releases_posts(directory, make_post, admin_ctx, department) -> None:
    activity = make_post(post_type="activity", category="CSE", department_id=department.id)

    directory.deactivate_department(department.id, admin_ctx)

    assert activity.department_id is None
