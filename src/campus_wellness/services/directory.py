"""Admin management of departments and moderators.

Every change here alters what the role resolver returns for somebody, so
the affected cached contexts are dropped after the change commits.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_wellness.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from campus_wellness.models import Department, ModeratorRecord
from campus_wellness.repositories.authority_repo import AuthorityRepository
from campus_wellness.repositories.department_repo import DepartmentRepository
from campus_wellness.repositories.post_repo import PostRepository
from campus_wellness.schemas.department import DepartmentCreate, DepartmentUpdate
from campus_wellness.schemas.moderator import ModeratorCreate
from campus_wellness.services.access import (
    AccessContext,
    AccessContextCache,
    get_access_cache,
)

logger = logging.getLogger(__name__)


def _require_admin(ctx: AccessContext) -> None:
    if not ctx.is_admin:
        raise AuthorizationError("Admin privileges required")


class DirectoryService:
    """Creates departments, reassigns their heads and manages moderators."""

    def __init__(self, session: Session, cache: AccessContextCache | None = None) -> None:
        self.session = session
        self.departments = DepartmentRepository(session)
        self.authorities = AuthorityRepository(session)
        self.cache = cache or get_access_cache()

    # --- departments ----------------------------------------------------------------
    def list_departments(
        self, ctx: AccessContext, *, include_inactive: bool = False
    ) -> list[Department]:
        """Return departments; inactive ones are listed for admins only."""
        if include_inactive:
            _require_admin(ctx)
        return self.departments.list_all(include_inactive=include_inactive)

    def get_department(self, department_id: int) -> Department:
        department = self.departments.get(department_id)
        if department is None:
            raise NotFoundError("Department not found")
        return department

    def create_department(self, data: DepartmentCreate, ctx: AccessContext) -> Department:
        """Create a department."""
        _require_admin(ctx)
        if self.departments.get_by_code(data.code) is not None:
            raise ConflictError(f"Department code {data.code!r} already exists")
        try:
            department = self.departments.create(**data.model_dump())
            self._relink_posts()
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(f"Department code {data.code!r} already exists") from exc

        if department.head_email:
            self.cache.invalidate_email(department.head_email)
        logger.info("Department %s created by %s", department.code, ctx.user_id)
        return department

    def update_department(
        self, department_id: int, data: DepartmentUpdate, ctx: AccessContext
    ) -> Department:
        """Apply a partial update; head and status changes drop affected sessions."""
        _require_admin(ctx)
        department = self.get_department(department_id)
        previous_head = department.head_email
        self.departments.update(department, data.model_dump(exclude_unset=True))
        if data.model_fields_set & {"name", "is_active"}:
            self._relink_posts()
        self.session.commit()

        if department.head_email != previous_head or "is_active" in data.model_fields_set:
            for email in {previous_head, department.head_email}:
                if email:
                    self.cache.invalidate_email(email)
        logger.info("Department %s updated by %s", department.code, ctx.user_id)
        return department

    def _relink_posts(self) -> None:
        PostRepository(self.session).relink_departments(self.departments.category_index())

    def deactivate_department(self, department_id: int, ctx: AccessContext) -> Department:
        """Hide a department from the complaint form and strip its head's authority."""
        return self.update_department(department_id, DepartmentUpdate(is_active=False), ctx)

    # --- moderators -----------------------------------------------------------------
    def list_moderators(
        self, ctx: AccessContext, *, include_inactive: bool = False
    ) -> list[ModeratorRecord]:
        _require_admin(ctx)
        return self.authorities.list_moderators(include_inactive=include_inactive)

    def grant_moderator(self, data: ModeratorCreate, ctx: AccessContext) -> ModeratorRecord:
        """Make a user a moderator (again)."""
        _require_admin(ctx)
        record = self.authorities.upsert_moderator(data.user_id, data.email, data.name)
        self.session.commit()
        self.cache.invalidate_user(data.user_id)
        logger.info("Moderator %s granted by %s", data.user_id, ctx.user_id)
        return record

    def revoke_moderator(self, user_id: str, ctx: AccessContext) -> None:
        """Deactivate a moderator; the record is kept."""
        _require_admin(ctx)
        if not self.authorities.deactivate_moderator(user_id):
            self.session.rollback()
            raise NotFoundError("Active moderator not found")
        self.session.commit()
        self.cache.invalidate_user(user_id)
        logger.info("Moderator %s revoked by %s", user_id, ctx.user_id)
