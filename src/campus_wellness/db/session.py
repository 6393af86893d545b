"""Engine, session factory and request-scoped sessions."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from campus_wellness.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections allow cross-thread use and enforce foreign keys."""
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": echo}
    if _is_sqlite(url):
        kwargs["connect_args"] = {"check_same_thread": False}
    new_engine = create_engine(url, **kwargs)

    if _is_sqlite(url):

        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


# Model modules register their tables on Base.metadata.
import campus_wellness.models  # noqa: E402,F401

engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """Yield a session for one request, discarding uncommitted work afterwards."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
