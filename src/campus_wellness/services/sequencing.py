"""Discarding superseded requests from the same actor.

Clients may tag a vote or status change with a monotonically increasing
``client_seq``. When a rapid re-click produces several requests, only a
request newer than every one already accepted for the same (actor, target)
is applied; older ones are dropped so the latest request's outcome wins.
"""

from __future__ import annotations

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_wellness.core.errors import ConflictError
from campus_wellness.models import ActionSequence


class ActionSequencer:
    """Claims sequence numbers inside the caller's transaction.

    The claim is rolled back together with the mutation it guards, so a
    request that fails can be retried with the same sequence number.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def claim(self, actor_id: str, scope: str, seq: int | None) -> bool:
        """Return True if the request may proceed, False if it is superseded.

        Requests without a sequence number always proceed.
        """
        if seq is None:
            return True

        result = self.session.execute(
            update(ActionSequence)
            .where(
                ActionSequence.actor_id == actor_id,
                ActionSequence.scope == scope,
                ActionSequence.last_seq < seq,
            )
            .values(last_seq=seq)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return True

        exists = self.session.execute(
            select(ActionSequence.last_seq).where(
                ActionSequence.actor_id == actor_id,
                ActionSequence.scope == scope,
            )
        ).scalar_one_or_none()
        if exists is not None:
            return False

        try:
            self.session.execute(
                insert(ActionSequence).values(actor_id=actor_id, scope=scope, last_seq=seq)
            )
        except IntegrityError as exc:
            # Another request from the same actor created the row first.
            raise ConflictError("Concurrent request from the same actor") from exc
        return True

    def last_seq(self, actor_id: str, scope: str) -> int | None:
        """Return the highest accepted sequence number, if any."""
        return self.session.execute(
            select(ActionSequence.last_seq).where(
                ActionSequence.actor_id == actor_id,
                ActionSequence.scope == scope,
            )
        ).scalar_one_or_none()
