"""Authority store adapter: admin, moderator and department-head records."""
from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from campus_wellness.db.time import utcnow
from campus_wellness.models import AdminRecord, Department, ModeratorRecord

__all__ = ["AuthorityRepository"]

logger = logging.getLogger(__name__)


class AuthorityRepository:
    """Reads the three independent authority records.

    Each lookup touches a single table and does not depend on the result of
    any other, so callers may issue them in any order.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    # --- lookups used by the role resolver ------------------------------------------
    def find_admin(self, user_id: str) -> AdminRecord | None:
        """Return the admin record for ``user_id`` if one exists."""
        return self.session.get(AdminRecord, user_id)

    def find_moderator(self, user_id: str) -> ModeratorRecord | None:
        """Return the moderator record for ``user_id``, active or not."""
        return self.session.get(ModeratorRecord, user_id)

    def find_department_for_head(self, email: str) -> Department | None:
        """Return the active department whose head email matches ``email``.

        If an email heads several departments the lowest id wins.
        """
        normalized = email.strip().lower()
        if not normalized:
            return None
        rows = self.session.execute(
            select(Department)
            .where(
                func.lower(Department.head_email) == normalized,
                Department.is_active.is_(True),
            )
            .order_by(Department.id)
            .limit(2)
        ).scalars().all()
        if len(rows) > 1:
            logger.warning(
                "Email %s heads more than one department; using department %s",
                normalized,
                rows[0].id,
            )
        return rows[0] if rows else None

    # --- writes used by the admin directory ----------------------------------------
    def grant_admin(self, user_id: str, email: str | None = None) -> AdminRecord:
        """Create the admin record for ``user_id`` if it is missing."""
        record = self.find_admin(user_id)
        if record is None:
            record = AdminRecord(user_id=user_id, email=email)
            self.session.add(record)
            self.session.flush()
        return record

    def revoke_admin(self, user_id: str) -> bool:
        """Delete the admin record; return False when none existed."""
        record = self.find_admin(user_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.flush()
        return True

    def upsert_moderator(self, user_id: str, email: str, name: str | None) -> ModeratorRecord:
        """Assign (or re-activate) a moderator."""
        record = self.find_moderator(user_id)
        if record is None:
            record = ModeratorRecord(user_id=user_id, email=email.strip().lower(), name=name)
            self.session.add(record)
        else:
            record.email = email.strip().lower()
            record.name = name or record.name
            record.is_active = True
            record.assigned_at = utcnow()
            record.removed_at = None
        self.session.flush()
        return record

    def deactivate_moderator(self, user_id: str) -> bool:
        """Mark a moderator inactive; the row is kept for audit."""
        result = self.session.execute(
            update(ModeratorRecord)
            .where(ModeratorRecord.user_id == user_id, ModeratorRecord.is_active.is_(True))
            .values(is_active=False, removed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def list_moderators(self, *, include_inactive: bool = False) -> list[ModeratorRecord]:
        """Return moderator records, newest assignment first."""
        stmt = select(ModeratorRecord).order_by(ModeratorRecord.assigned_at.desc())
        if not include_inactive:
            stmt = stmt.where(ModeratorRecord.is_active.is_(True))
        return list(self.session.execute(stmt).scalars())
