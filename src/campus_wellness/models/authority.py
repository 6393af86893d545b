# src/campus_wellness/models/authority.py
"""Authority records: who holds admin and moderator privileges."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_wellness.db.session import Base
from campus_wellness.db.time import utcnow


class AdminRecord(Base):
    """Presence of a row grants admin authority to ``user_id``."""

    __tablename__ = "admin_record"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ModeratorRecord(Base):
    """Moderator assignment.

    Removal clears ``is_active`` instead of deleting the row so the
    assignment history survives for audit.
    """

    __tablename__ = "moderator_record"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    removed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
