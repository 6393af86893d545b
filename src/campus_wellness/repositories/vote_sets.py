"""Per-row vote set primitives shared by every votable table."""
from __future__ import annotations

from typing import Any, ClassVar, Literal

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.orm import Session

__all__ = ["CounterField", "VoteSetRepository"]

CounterField = Literal["upvotes", "downvotes"]


class VoteSetRepository:
    """Vote membership and counters for one kind of votable row.

    The vote table holds one row per (target, user); rows with direction 1
    form the upvoted set and rows with direction -1 the downvoted set.
    Membership is mutated one row at a time and counters only by SQL-side
    increments. None of these methods commit.

    Subclasses set ``target``, ``vote_model`` and ``target_key`` (the vote
    table's column referencing the target).
    """

    target: ClassVar[type[Any]]
    vote_model: ClassVar[type[Any]]
    target_key: ClassVar[str]
    label: ClassVar[str] = "Item"

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    @property
    def _vote_target(self) -> Any:
        return getattr(self.vote_model, self.target_key)

    def get_by_id(self, target_id: int, *, include_deleted: bool = False) -> Any | None:
        """Return a row by identifier."""
        stmt = select(self.target).where(self.target.id == target_id)
        if not include_deleted:
            stmt = stmt.where(self.target.deleted.is_(False))
        return self.session.execute(stmt).scalars().first()

    def get_vote_direction(self, target_id: int, user_id: str) -> int | None:
        """Return 1, -1 or None for the user's current vote."""
        return self.session.execute(
            select(self.vote_model.direction).where(
                self._vote_target == target_id,
                self.vote_model.voter_user_id == user_id,
            )
        ).scalar_one_or_none()

    def add_to_set(self, target_id: int, user_id: str, direction: int) -> None:
        """Add ``user_id`` to the directional voter set.

        Raises ``sqlalchemy.exc.IntegrityError`` if the user already has a
        vote row on this target.
        """
        self.session.execute(
            insert(self.vote_model).values(
                {self.target_key: target_id, "voter_user_id": user_id, "direction": direction}
            )
        )

    def remove_from_set(self, target_id: int, user_id: str, direction: int) -> bool:
        """Remove ``user_id`` from the directional set if it is still there."""
        result = self.session.execute(
            delete(self.vote_model)
            .where(
                self._vote_target == target_id,
                self.vote_model.voter_user_id == user_id,
                self.vote_model.direction == direction,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def move_between_sets(
        self, target_id: int, user_id: str, from_direction: int, to_direction: int
    ) -> bool:
        """Move ``user_id`` from one directional set to the other in one statement."""
        result = self.session.execute(
            update(self.vote_model)
            .where(
                self._vote_target == target_id,
                self.vote_model.voter_user_id == user_id,
                self.vote_model.direction == from_direction,
            )
            .values(direction=to_direction)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_field(self, target_id: int, field: CounterField, delta: int) -> None:
        """Apply ``delta`` to a counter column inside the database."""
        column = getattr(self.target, field)
        self.session.execute(
            update(self.target)
            .where(self.target.id == target_id)
            .values({field: column + delta})
            .execution_options(synchronize_session=False)
        )

    def counts(self, target_id: int) -> tuple[int, int]:
        """Return the stored ``(upvotes, downvotes)`` counters."""
        row = self.session.execute(
            select(self.target.upvotes, self.target.downvotes).where(
                self.target.id == target_id
            )
        ).one()
        return int(row.upvotes), int(row.downvotes)

    def tally(self, target_id: int) -> tuple[int, int]:
        """Recount ``(upvotes, downvotes)`` from the vote rows."""
        rows = self.session.execute(
            select(self.vote_model.direction, func.count())
            .where(self._vote_target == target_id)
            .group_by(self.vote_model.direction)
        ).all()
        by_direction = {int(direction): int(total) for direction, total in rows}
        return by_direction.get(1, 0), by_direction.get(-1, 0)

    def voters(self, target_id: int, direction: int) -> set[str]:
        """Return the ids in one directional voter set."""
        return set(
            self.session.execute(
                select(self.vote_model.voter_user_id).where(
                    self._vote_target == target_id,
                    self.vote_model.direction == direction,
                )
            ).scalars()
        )
