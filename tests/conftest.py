# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-entropy")
os.environ.setdefault("ACTIVITY_CLEANUP_ENABLED", "false")
os.environ.setdefault("RESOLUTION_RETRY_BACKOFF_SECONDS", "0")

from campus_wellness.core.security import Identity, create_identity_token
from campus_wellness.db.session import Base
from campus_wellness.db.session import get_db as app_get_session
from campus_wellness.db.time import utcnow
from campus_wellness.main import app as fastapi_app
from campus_wellness.models import AdminRecord, Department, ModeratorRecord, Post
from campus_wellness.services.access import AccessContext, DepartmentRef, get_access_cache

TEST_DB_URL = "sqlite://"

ADMIN_ID = "admin-1"
ADMIN_EMAIL = "admin@campus.edu"
MODERATOR_ID = "mod-1"
MODERATOR_EMAIL = "mod@campus.edu"
HEAD_ID = "head-1"
HEAD_EMAIL = "head.cse@campus.edu"
STUDENT_ID = "student-1"
STUDENT_EMAIL = "student@campus.edu"
OTHER_ID = "student-2"
OTHER_EMAIL = "other@campus.edu"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    # A fresh in-memory database per test; services commit and roll back freely.
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def clear_access_cache() -> Iterator[None]:
    get_access_cache().clear()
    yield
    get_access_cache().clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


# --- identities -----------------------------------------------------------------------
@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Return a factory building Authorization headers for any identity."""

    def _build(
        user_id: str,
        email: str,
        *,
        name: str | None = None,
        session_id: str | None = None,
        email_verified: bool = True,
    ) -> dict[str, str]:
        token = create_identity_token(
            user_id,
            email,
            name=name,
            session_id=session_id,
            email_verified=email_verified,
        )
        return {"Authorization": f"Bearer {token}"}

    return _build


@pytest.fixture()
def student_headers(auth_headers) -> dict[str, str]:
    return auth_headers(STUDENT_ID, STUDENT_EMAIL, name="Sam Student")


@pytest.fixture()
def other_headers(auth_headers) -> dict[str, str]:
    return auth_headers(OTHER_ID, OTHER_EMAIL, name="Olive Other")


@pytest.fixture()
def admin_headers(auth_headers, admin_record) -> dict[str, str]:
    return auth_headers(ADMIN_ID, ADMIN_EMAIL, name="Ada Admin")


@pytest.fixture()
def moderator_headers(auth_headers, moderator_record) -> dict[str, str]:
    return auth_headers(MODERATOR_ID, MODERATOR_EMAIL, name="Max Mod")


@pytest.fixture()
def head_headers(auth_headers, department) -> dict[str, str]:
    return auth_headers(HEAD_ID, HEAD_EMAIL, name="Hana Head")


@pytest.fixture()
def student_identity() -> Identity:
    return Identity(user_id=STUDENT_ID, email=STUDENT_EMAIL, name="Sam Student")


# --- authority records ----------------------------------------------------------------
@pytest.fixture()
def admin_record(db_session: Session) -> AdminRecord:
    record = AdminRecord(user_id=ADMIN_ID, email=ADMIN_EMAIL)
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture()
def moderator_record(db_session: Session) -> ModeratorRecord:
    record = ModeratorRecord(user_id=MODERATOR_ID, email=MODERATOR_EMAIL, name="Max Mod")
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture()
def department(db_session: Session) -> Department:
    """Computer science department headed by HEAD_EMAIL."""
    dept = Department(
        code="CSE",
        name="Computer Science",
        head_name="Hana Head",
        head_email=HEAD_EMAIL,
        head_phone_number="+1-555-0199",
    )
    db_session.add(dept)
    db_session.commit()
    return dept


@pytest.fixture()
def other_department(db_session: Session) -> Department:
    dept = Department(
        code="ME",
        name="Mechanical Engineering",
        head_name="Mo Mech",
        head_email="head.me@campus.edu",
        head_phone_number="+1-555-0177",
    )
    db_session.add(dept)
    db_session.commit()
    return dept


# --- access contexts for service-level tests -------------------------------------------
@pytest.fixture()
def member_ctx() -> AccessContext:
    return AccessContext(user_id=STUDENT_ID, email=STUDENT_EMAIL)


@pytest.fixture()
def admin_ctx() -> AccessContext:
    return AccessContext(user_id=ADMIN_ID, email=ADMIN_EMAIL, is_admin=True)


@pytest.fixture()
def moderator_ctx() -> AccessContext:
    return AccessContext(user_id=MODERATOR_ID, email=MODERATOR_EMAIL, is_moderator=True)


@pytest.fixture()
def head_ctx(department: Department) -> AccessContext:
    return AccessContext(
        user_id=HEAD_ID,
        email=HEAD_EMAIL,
        department_head_of=DepartmentRef(
            id=department.id, code=department.code, name=department.name
        ),
    )


# --- content --------------------------------------------------------------------------
@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory persisting posts with sensible defaults."""

    def _make(**overrides: object) -> Post:
        fields: dict[str, object] = {
            "author_id": OTHER_ID,
            "author_name": "Olive Other",
            "content": "The library closes too early during exams",
            "post_type": "concern",
            "category": "facilities",
            "visibility": "public",
        }
        fields.update(overrides)
        if fields["post_type"] == "activity":
            fields.setdefault("activity_date", utcnow() + timedelta(days=3))
            fields.setdefault("max_participants", 10)
        post = Post(**fields)
        db_session.add(post)
        db_session.commit()
        return post

    return _make


@pytest.fixture()
def test_post(make_post) -> Post:
    """A public concern written by OTHER_ID."""
    return make_post()
