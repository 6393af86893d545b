"""Data access helpers for departments."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from campus_wellness.db.time import utcnow
from campus_wellness.models import Department

__all__ = ["DepartmentRepository"]


class DepartmentRepository:
    """Thin wrapper around database access for department entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get(self, department_id: int) -> Department | None:
        """Return a department by identifier."""
        return self.session.get(Department, department_id)

    def get_by_code(self, code: str) -> Department | None:
        """Return a department by its unique code (case-insensitive)."""
        return self.session.execute(
            select(Department).where(func.upper(Department.code) == code.strip().upper())
        ).scalars().first()

    def list_all(self, *, include_inactive: bool = False) -> list[Department]:
        """Return departments ordered by name."""
        stmt = select(Department).order_by(Department.name)
        if not include_inactive:
            stmt = stmt.where(Department.is_active.is_(True))
        return list(self.session.execute(stmt).scalars())

    def category_index(self) -> dict[str, int]:
        """Map the lower-cased code and name of each active department to its id.

        When two departments share a key the lower id wins, as in
        :meth:`match_category`.
        """
        rows = self.session.execute(
            select(Department.id, Department.code, Department.name)
            .where(Department.is_active.is_(True))
            .order_by(Department.id)
        ).all()
        index: dict[str, int] = {}
        for department_id, code, name in rows:
            for key in (code, name):
                if key and key.strip():
                    index.setdefault(key.strip().lower(), department_id)
        return index

    def match_category(self, category: str) -> Department | None:
        """Return the active department a post category names, if any.

        A category names a department when it equals the department's code or
        name, ignoring case.
        """
        needle = category.strip().lower()
        if not needle:
            return None
        return self.session.execute(
            select(Department)
            .where(
                Department.is_active.is_(True),
                or_(func.lower(Department.code) == needle, func.lower(Department.name) == needle),
            )
            .order_by(Department.id)
        ).scalars().first()

    def create(self, **fields: Any) -> Department:
        """Insert a new department and return the persisted instance."""
        if fields.get("head_email"):
            fields["head_email"] = fields["head_email"].strip().lower()
        department = Department(**fields)
        self.session.add(department)
        self.session.flush()
        return department

    def update(self, department: Department, changes: Mapping[str, Any]) -> Department:
        """Apply partial updates to an existing department."""
        for key, value in changes.items():
            if key == "head_email" and value:
                value = value.strip().lower()
            setattr(department, key, value)
        department.updated_at = utcnow()
        self.session.flush()
        return department
