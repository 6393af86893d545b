# src/campus_wellness/models/department.py
"""Department model used for head-of lookups and complaint routing."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_wellness.db.session import Base
from campus_wellness.db.time import utcnow


class Department(Base):
    """An academic or administrative department owned by admins."""

    __tablename__ = "department"
    __table_args__ = (Index("ix_department_head_email", "head_email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Short unique handle, e.g. "CSE"; posts whose category matches it are scoped to it.
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    head_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Stored lower-cased; the head-of relation is an equality join on this column.
    head_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    head_phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
