"""Tests for identity token verification."""

import hashlib

import pytest
from jose import jwt

from campus_wellness.core.security import (
    IdentityTokenError,
    create_identity_token,
    decode_identity_token,
)
from campus_wellness.core.settings import settings


def test_round_trip_normalizes_email() -> None:
    token = create_identity_token("u-1", "Student@Campus.EDU", name="Sam", session_id="s-1")

    identity = decode_identity_token(token)

    assert identity.user_id == "u-1"
    assert identity.email == "student@campus.edu"
    assert identity.name == "Sam"
    assert identity.session_id == "s-1"


def test_session_defaults_to_token_digest() -> None:
    token = create_identity_token("u-1", "student@campus.edu")

    identity = decode_identity_token(token)

    assert identity.session_id == hashlib.sha256(token.encode()).hexdigest()


def test_unverified_email_is_rejected() -> None:
    token = create_identity_token("u-1", "student@campus.edu", email_verified=False)

    with pytest.raises(IdentityTokenError):
        decode_identity_token(token)


def test_wrong_signature_is_rejected() -> None:
    token = jwt.encode(
        {"sub": "u-1", "email": "a@campus.edu", "email_verified": True},
        "not-the-secret",
        algorithm=settings.identity_token_algorithm,
    )

    with pytest.raises(IdentityTokenError):
        decode_identity_token(token)


def test_missing_email_is_rejected() -> None:
    token = jwt.encode(
        {"sub": "u-1", "email_verified": True},
        settings.effective_identity_secret,
        algorithm=settings.identity_token_algorithm,
    )

    with pytest.raises(IdentityTokenError):
        decode_identity_token(token)
