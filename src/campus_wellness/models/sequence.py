# src/campus_wellness/models/sequence.py
"""Per-actor request sequencing used to discard superseded requests."""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_wellness.db.session import Base


class ActionSequence(Base):
    """Highest client sequence number accepted for an (actor, scope) pair."""

    __tablename__ = "action_sequence"

    actor_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    # e.g. "vote:42" or "complaint:anon_ab12".
    scope: Mapped[str] = mapped_column(String(160), primary_key=True)
    last_seq: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
