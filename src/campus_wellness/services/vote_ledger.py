"""Vote ledger: at most one switchable vote per user and post.

Each (post, user) pair is in one of three states: none, up or down. A vote
request reads the pair's state and then commits a single targeted mutation
that is conditional on that state still holding:

    none -> up/down    insert the user's vote row, bump one counter
    up <-> down        flip the row's direction, move one unit between counters
    up/down -> none    delete the row, decrement one counter

Counter changes happen in the same transaction as the row change and are
applied as SQL increments, so ``upvotes`` and ``downvotes`` always equal the
sizes of the directional voter sets. When the precondition no longer holds
the transaction is rolled back and :class:`ConflictError` is raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_wellness.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from campus_wellness.core.settings import settings
from campus_wellness.models.vote import VOTE_DOWN, VOTE_UP
from campus_wellness.repositories.department_repo import DepartmentRepository
from campus_wellness.repositories.post_repo import PostRepository
from campus_wellness.repositories.vote_sets import CounterField, VoteSetRepository
from campus_wellness.services.access import AccessContext
from campus_wellness.services.sequencing import ActionSequencer
from campus_wellness.services.visibility import is_visible

logger = logging.getLogger(__name__)

VoteDirection = Literal["up", "down", "clear"]
VoteState = Literal["up", "down"] | None

_DIRECTION_VALUES: dict[str, int | None] = {"up": VOTE_UP, "down": VOTE_DOWN, "clear": None}
_STATE_NAMES: dict[int, Literal["up", "down"]] = {VOTE_UP: "up", VOTE_DOWN: "down"}
_COUNTERS: dict[int, CounterField] = {VOTE_UP: "upvotes", VOTE_DOWN: "downvotes"}


@dataclass(frozen=True)
class VoteCounts:
    """Counters of a post after a vote request, plus the caller's own vote."""

    post_id: int
    upvotes: int
    downvotes: int
    direction: VoteState
    changed: bool = False
    superseded: bool = False


@dataclass(frozen=True)
class VoteSnapshot:
    """Full vote state of a post: both voter sets and both counters."""

    post_id: int
    upvoted_by: frozenset[str]
    downvoted_by: frozenset[str]
    upvotes: int
    downvotes: int

    @property
    def voted_users(self) -> frozenset[str]:
        """Everyone who currently has a vote on the post."""
        return self.upvoted_by | self.downvoted_by

    @property
    def is_consistent(self) -> bool:
        """True when counters match the sets and no user is in both sets."""
        return (
            self.upvotes == len(self.upvoted_by)
            and self.downvotes == len(self.downvoted_by)
            and not (self.upvoted_by & self.downvoted_by)
        )


class VoteLedger:
    """Applies vote requests against a vote-set repository (posts by default)."""

    def __init__(
        self,
        session: Session,
        *,
        repo: VoteSetRepository | None = None,
        scope: str = "vote",
        allow_self_votes: bool | None = None,
    ) -> None:
        """Create a ledger over ``repo``; posts by default.

        ``scope`` prefixes the per-client sequence key so counters for different
        votable tables never collide.
        """
        self.session = session
        self.repo = repo if repo is not None else PostRepository(session)
        self.departments = DepartmentRepository(session)
        self.scope = scope
        self.sequencer = ActionSequencer(session)
        self.allow_self_votes = (
            settings.allow_self_votes if allow_self_votes is None else allow_self_votes
        )

    # --- reads ----------------------------------------------------------------------
    def current_direction(self, post_id: int, user_id: str) -> VoteState:
        """Return the user's vote on a post: "up", "down" or None."""
        value = self.repo.get_vote_direction(post_id, user_id)
        return None if value is None else _STATE_NAMES[value]

    def snapshot(self, post_id: int) -> VoteSnapshot:
        """Return both voter sets and the stored counters of a post."""
        upvotes, downvotes = self.repo.counts(post_id)
        return VoteSnapshot(
            post_id=post_id,
            upvoted_by=frozenset(self.repo.voters(post_id, VOTE_UP)),
            downvoted_by=frozenset(self.repo.voters(post_id, VOTE_DOWN)),
            upvotes=upvotes,
            downvotes=downvotes,
        )

    def tally(self, post_id: int) -> tuple[int, int]:
        """Recount ``(upvotes, downvotes)`` from the vote rows themselves."""
        return self.repo.tally(post_id)

    # --- writes ---------------------------------------------------------------------
    def apply_vote(
        self,
        post_id: int,
        user_id: str,
        direction: VoteDirection,
        *,
        ctx: AccessContext | None = None,
        client_seq: int | None = None,
    ) -> VoteCounts:
        """Read the user's current vote and move it to ``direction``.

        Repeating the same direction is a no-op that returns the current
        counts. ``ctx``, when given, must be able to see the post.

        Raises:
            NotFoundError: The post does not exist or is hidden from ``ctx``.
            AuthorizationError: The author votes on their own post.
            ConflictError: A concurrent request changed the user's vote.
        """
        post = self._load_post(post_id, ctx)
        self._check_voter(post, user_id, direction)
        expected = self.current_direction(post_id, user_id)
        return self.commit_vote(
            post_id,
            user_id,
            direction,
            expected=expected,
            client_seq=client_seq,
        )

    def commit_vote(
        self,
        post_id: int,
        user_id: str,
        direction: VoteDirection,
        *,
        expected: VoteState,
        client_seq: int | None = None,
    ) -> VoteCounts:
        """Commit the transition from ``expected`` to ``direction``.

        ``expected`` is the vote state the caller last read; if the stored
        state differs the whole transaction is rolled back and
        :class:`ConflictError` is raised.
        """
        if direction not in _DIRECTION_VALUES:
            raise ValidationError("Invalid vote direction", {"direction": str(direction)})
        target = _DIRECTION_VALUES[direction]
        current = _DIRECTION_VALUES[expected] if expected is not None else None

        try:
            if not self.sequencer.claim(user_id, f"{self.scope}:{post_id}", client_seq):
                self.session.rollback()
                return self._result(post_id, user_id, changed=False, superseded=True)
            changed = self._transition(post_id, user_id, current, target)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("Vote conflict on post %s for user %s", post_id, user_id)
            raise ConflictError("Vote changed concurrently; retry with fresh state") from exc
        except ConflictError:
            self.session.rollback()
            logger.info("Vote conflict on post %s for user %s", post_id, user_id)
            raise
        except SQLAlchemyError:
            self.session.rollback()
            raise

        return self._result(post_id, user_id, changed=changed)

    # --- helpers --------------------------------------------------------------------
    def _load_post(self, post_id: int, ctx: AccessContext | None) -> Any:
        post = self.repo.get_by_id(post_id)
        if post is not None and ctx is not None:
            if not is_visible(post, ctx, self.departments.category_index()):
                post = None
        if post is None:
            raise NotFoundError(f"{self.repo.label} not found")
        return post

    def _check_voter(self, post: Any, user_id: str, direction: VoteDirection) -> None:
        if direction != "clear" and not self.allow_self_votes and post.author_id == user_id:
            raise AuthorizationError("Authors cannot vote on their own posts")

    def _transition(
        self, post_id: int, user_id: str, current: int | None, target: int | None
    ) -> bool:
        if current == target:
            return False

        if current is None:
            self.repo.add_to_set(post_id, user_id, target)  # type: ignore[arg-type]
            self.repo.increment_field(post_id, _COUNTERS[target], 1)  # type: ignore[index]
        elif target is None:
            if not self.repo.remove_from_set(post_id, user_id, current):
                raise ConflictError("Vote changed concurrently; retry with fresh state")
            self.repo.increment_field(post_id, _COUNTERS[current], -1)
        else:
            if not self.repo.move_between_sets(post_id, user_id, current, target):
                raise ConflictError("Vote changed concurrently; retry with fresh state")
            self.repo.increment_field(post_id, _COUNTERS[current], -1)
            self.repo.increment_field(post_id, _COUNTERS[target], 1)
        return True

    def _result(
        self, post_id: int, user_id: str, *, changed: bool, superseded: bool = False
    ) -> VoteCounts:
        upvotes, downvotes = self.repo.counts(post_id)
        return VoteCounts(
            post_id=post_id,
            upvotes=upvotes,
            downvotes=downvotes,
            direction=self.current_direction(post_id, user_id),
            changed=changed,
            superseded=superseded,
        )


def apply_vote_with_retry(
    ledger: VoteLedger,
    post_id: int,
    user_id: str,
    direction: VoteDirection,
    *,
    ctx: AccessContext | None = None,
    client_seq: int | None = None,
    attempts: int | None = None,
) -> VoteCounts:
    """Apply a vote, re-reading state and retrying on :class:`ConflictError`."""
    attempts = max(1, attempts if attempts is not None else settings.vote_conflict_retries)
    for attempt in range(1, attempts + 1):
        try:
            return ledger.apply_vote(
                post_id,
                user_id,
                direction,
                ctx=ctx,
                client_seq=client_seq,
            )
        except ConflictError:
            if attempt == attempts:
                raise
            logger.debug("Retrying vote on post %s (attempt %d)", post_id, attempt + 1)
    raise AssertionError("unreachable")  # pragma: no cover
