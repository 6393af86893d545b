"""Role resolution: turning authority records into an immutable AccessContext.

Authority is a flat set of independent capabilities rather than a ranked
hierarchy. A user can be an admin, a moderator and a department head at the
same time; holding none of them makes the user a plain member whose rights
are scoped to their own content.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock

from sqlalchemy.exc import SQLAlchemyError

from campus_wellness.core.errors import ResolutionError
from campus_wellness.core.security import Identity
from campus_wellness.core.settings import settings
from campus_wellness.db.time import utcnow
from campus_wellness.models import AdminRecord, Department, ModeratorRecord
from campus_wellness.repositories.authority_repo import AuthorityRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepartmentRef:
    """Reference to the department a user heads."""

    id: int
    code: str
    name: str


@dataclass(frozen=True)
class AccessContext:
    """Resolved, immutable snapshot of a session's privileges."""

    user_id: str
    email: str
    is_admin: bool = False
    is_moderator: bool = False
    department_head_of: DepartmentRef | None = None
    resolved_at: datetime = field(default_factory=utcnow)

    @property
    def is_member_only(self) -> bool:
        """True when the user holds none of the three authorities."""
        return not (self.is_admin or self.is_moderator or self.department_head_of)

    @property
    def can_moderate(self) -> bool:
        """Admins and active moderators may see and remove community content."""
        return self.is_admin or self.is_moderator

    def heads(self, department_id: int | None) -> bool:
        """Return True if this context heads ``department_id``."""
        return (
            department_id is not None
            and self.department_head_of is not None
            and self.department_head_of.id == department_id
        )

    def authorities(self) -> list[str]:
        """Return the names of the authorities held, for display and logs."""
        held = []
        if self.is_admin:
            held.append("admin")
        if self.is_moderator:
            held.append("moderator")
        if self.department_head_of is not None:
            held.append(f"department_head:{self.department_head_of.code}")
        return held or ["member"]


def combine_authorities(
    user_id: str,
    email: str,
    *,
    admin: AdminRecord | None,
    moderator: ModeratorRecord | None,
    department: Department | None,
) -> AccessContext:
    """Merge the three lookup results into one context.

    Every input is evaluated; finding one authority never hides another.
    """
    head_of = None
    if department is not None and department.is_active:
        head_of = DepartmentRef(id=department.id, code=department.code, name=department.name)
    return AccessContext(
        user_id=user_id,
        email=email,
        is_admin=admin is not None,
        is_moderator=moderator is not None and bool(moderator.is_active),
        department_head_of=head_of,
    )


class RoleResolver:
    """Resolves an :class:`AccessContext` from the authority store."""

    def __init__(
        self,
        repo: AuthorityRepository,
        *,
        attempts: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.repo = repo
        if attempts is None:
            attempts = settings.resolution_retry_attempts
        self.attempts = max(1, attempts)
        self.backoff_seconds = (
            backoff_seconds
            if backoff_seconds is not None
            else settings.resolution_retry_backoff_seconds
        )

    def _resolve_once(self, user_id: str, email: str) -> AccessContext:
        # The three lookups are independent of one another.
        admin = self.repo.find_admin(user_id)
        moderator = self.repo.find_moderator(user_id)
        department = self.repo.find_department_for_head(email)
        return combine_authorities(
            user_id,
            email,
            admin=admin,
            moderator=moderator,
            department=department,
        )

    async def resolve(self, user_id: str, verified_email: str) -> AccessContext:
        """Return the user's access context.

        Raises:
            ResolutionError: If the store stays unreachable after all retries.
        """
        email = verified_email.strip().lower()
        last_error: SQLAlchemyError | None = None
        for attempt in range(1, self.attempts + 1):
            try:
                return self._resolve_once(user_id, email)
            except SQLAlchemyError as exc:
                last_error = exc
                self.repo.session.rollback()
                logger.warning(
                    "Authority lookup failed for %s (attempt %d/%d): %s",
                    user_id,
                    attempt,
                    self.attempts,
                    exc,
                )
                if attempt < self.attempts and self.backoff_seconds > 0:
                    await asyncio.sleep(self.backoff_seconds * 2 ** (attempt - 1))
        raise ResolutionError("Authority store is unreachable; try again") from last_error


class AccessContextCache:
    """One AccessContext per session, replaced wholesale on refresh.

    Entries are never patched in place. Authority changes made elsewhere are
    only observed after an explicit refresh, an invalidation, or once the
    entry is older than ``max_age_seconds``.
    """

    def __init__(self, max_age_seconds: int | None = None) -> None:
        self.max_age_seconds = (
            max_age_seconds
            if max_age_seconds is not None
            else settings.access_context_max_age_seconds
        )
        self._entries: dict[str, AccessContext] = {}
        self._lock = Lock()

    def get(self, session_key: str) -> AccessContext | None:
        """Return the cached context if present and still fresh."""
        with self._lock:
            ctx = self._entries.get(session_key)
        if ctx is None:
            return None
        if utcnow() - ctx.resolved_at > timedelta(seconds=self.max_age_seconds):
            return None
        return ctx

    def put(self, session_key: str, ctx: AccessContext) -> None:
        """Store ``ctx`` as the session's context, replacing any previous one."""
        with self._lock:
            self._entries[session_key] = ctx

    def invalidate(self, session_key: str) -> None:
        """Drop the session's context so the next request re-resolves it."""
        with self._lock:
            self._entries.pop(session_key, None)

    def invalidate_user(self, user_id: str) -> int:
        """Drop every cached context belonging to ``user_id``."""
        with self._lock:
            keys = [key for key, ctx in self._entries.items() if ctx.user_id == user_id]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def invalidate_email(self, email: str) -> int:
        """Drop every cached context resolved for ``email``."""
        normalized = email.strip().lower()
        with self._lock:
            keys = [key for key, ctx in self._entries.items() if ctx.email == normalized]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        """Forget all sessions."""
        with self._lock:
            self._entries.clear()

    async def get_or_resolve(
        self,
        identity: Identity,
        resolver: RoleResolver,
        *,
        refresh: bool = False,
    ) -> AccessContext:
        """Return the session's context, resolving it when missing or stale."""
        session_key = identity.session_id or identity.user_id
        if not refresh:
            cached = self.get(session_key)
            if cached is not None and cached.user_id == identity.user_id:
                return cached
        ctx = await resolver.resolve(identity.user_id, identity.email)
        self.put(session_key, ctx)
        return ctx


_ACCESS_CACHE = AccessContextCache()


def get_access_cache() -> AccessContextCache:
    """Return the process-wide session context cache."""
    return _ACCESS_CACHE
