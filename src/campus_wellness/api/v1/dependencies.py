"""Shared API dependencies for authentication and access resolution."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_wellness.core.security import Identity, IdentityTokenError, decode_identity_token
from campus_wellness.db.session import get_db
from campus_wellness.repositories.authority_repo import AuthorityRepository
from campus_wellness.services.access import (
    AccessContext,
    AccessContextCache,
    RoleResolver,
    get_access_cache,
)
from campus_wellness.services.notifier import NotifierClient, get_notifier

# HTTP Bearer scheme carrying the identity provider's token
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> Identity:
    """Verify the bearer token and return the identity it asserts.

    Raises:
        HTTPException: If the token is invalid, expired or the email is unverified.
    """
    try:
        return decode_identity_token(credentials.credentials)
    except IdentityTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(err),
            headers={"WWW-Authenticate": "Bearer"},
        ) from err


IdentityDep = Annotated[Identity, Depends(get_identity)]


def get_access_cache_dep() -> AccessContextCache:
    """Return the shared session context cache."""
    return get_access_cache()


AccessCacheDep = Annotated[AccessContextCache, Depends(get_access_cache_dep)]


async def get_access_context(
    identity: IdentityDep,
    db: SessionDep,
    cache: AccessCacheDep,
) -> AccessContext:
    """Return the session's cached context, resolving it when missing or stale."""
    return await cache.get_or_resolve(identity, RoleResolver(AuthorityRepository(db)))


async def get_fresh_access_context(
    identity: IdentityDep,
    db: SessionDep,
    cache: AccessCacheDep,
) -> AccessContext:
    """Re-resolve the context before a privileged action."""
    return await cache.get_or_resolve(
        identity, RoleResolver(AuthorityRepository(db)), refresh=True
    )


AccessDep = Annotated[AccessContext, Depends(get_access_context)]
FreshAccessDep = Annotated[AccessContext, Depends(get_fresh_access_context)]


def get_notifier_dep() -> NotifierClient:
    """Return the shared notifier client."""
    return get_notifier()


NotifierDep = Annotated[NotifierClient, Depends(get_notifier_dep)]
