"""Identity token handling.

Sign-in is delegated to an external identity provider. It hands the client a
signed token whose claims carry the stable user id and verified email; this
module verifies that token and exposes the pair as an :class:`Identity`.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from campus_wellness.core.settings import settings


class IdentityTokenError(ValueError):
    """Raised when an identity token is invalid, expired or unverified."""


@dataclass(frozen=True)
class Identity:
    """The user identity trusted by the core without re-verification."""

    user_id: str
    email: str
    name: str | None = None
    session_id: str | None = None


def _session_key(token: str, claims: dict[str, object]) -> str:
    sid = claims.get("sid")
    if isinstance(sid, str) and sid:
        return sid
    # Tokens without a session claim are keyed by their own digest.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def decode_identity_token(token: str) -> Identity:
    """Verify ``token`` and return the identity it asserts.

    Raises:
        IdentityTokenError: If the signature, expiry or claims are invalid.
    """
    options = {"verify_aud": settings.identity_token_audience is not None}
    try:
        claims = jwt.decode(
            token,
            settings.effective_identity_secret,
            algorithms=[settings.identity_token_algorithm],
            audience=settings.identity_token_audience,
            options=options,
        )
    except JWTError as err:
        raise IdentityTokenError("Could not validate credentials") from err

    subject = claims.get("sub")
    email = claims.get("email")
    if not isinstance(subject, str) or not subject:
        raise IdentityTokenError("Token has no subject")
    if not isinstance(email, str) or not email:
        raise IdentityTokenError("Token has no email")
    if claims.get("email_verified") is not True:
        raise IdentityTokenError("Email address is not verified")

    name = claims.get("name")
    return Identity(
        user_id=subject,
        email=email.strip().lower(),
        name=name if isinstance(name, str) else None,
        session_id=_session_key(token, claims),
    )


def create_identity_token(
    user_id: str,
    email: str,
    *,
    name: str | None = None,
    session_id: str | None = None,
    email_verified: bool = True,
) -> str:
    """Issue a token in the identity provider's format.

    Used by local tooling and tests; production tokens come from the provider.
    """
    to_encode: dict[str, object] = {
        "sub": user_id,
        "email": email,
        "email_verified": email_verified,
    }
    if name:
        to_encode["name"] = name
    if session_id:
        to_encode["sid"] = session_id
    if settings.identity_token_audience:
        to_encode["aud"] = settings.identity_token_audience
    expire = datetime.now(UTC) + timedelta(minutes=settings.identity_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.effective_identity_secret,
        algorithm=settings.identity_token_algorithm,
    )
    return encoded_jwt
