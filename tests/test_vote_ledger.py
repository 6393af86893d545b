"""Tests for the vote ledger and its counter invariants."""

import pytest

from campus_wellness.core.errors import AuthorizationError, ConflictError, NotFoundError
from campus_wellness.services.access import AccessContext
from campus_wellness.services.vote_ledger import VoteLedger, apply_vote_with_retry

from .conftest import OTHER_ID

USER_A = "user-a"
USER_B = "user-b"


@pytest.fixture()
def ledger(db_session) -> VoteLedger:
    return VoteLedger(db_session)


def _assert_consistent(ledger: VoteLedger, post_id: int) -> None:
    snapshot = ledger.snapshot(post_id)
    assert snapshot.is_consistent
    assert ledger.tally(post_id) == (snapshot.upvotes, snapshot.downvotes)


def test_first_upvote(ledger, test_post) -> None:
    counts = ledger.apply_vote(test_post.id, USER_A, "up")

    assert (counts.upvotes, counts.downvotes) == (1, 0)
    assert counts.direction == "up"
    assert counts.changed
    _assert_consistent(ledger, test_post.id)


def test_two_users_switching_scenario(ledger, test_post) -> None:
    """A up -> 1/0; A down -> 0/1; B down -> 0/2."""
    counts = ledger.apply_vote(test_post.id, USER_A, "up")
    assert (counts.upvotes, counts.downvotes) == (1, 0)

    counts = ledger.apply_vote(test_post.id, USER_A, "down")
    assert (counts.upvotes, counts.downvotes) == (0, 1)

    counts = ledger.apply_vote(test_post.id, USER_B, "down")
    assert (counts.upvotes, counts.downvotes) == (0, 2)

    snapshot = ledger.snapshot(test_post.id)
    assert snapshot.upvoted_by == frozenset()
    assert snapshot.downvoted_by == {USER_A, USER_B}
    assert snapshot.voted_users == {USER_A, USER_B}
    _assert_consistent(ledger, test_post.id)


def test_repeating_a_vote_is_idempotent(ledger, test_post) -> None:
    ledger.apply_vote(test_post.id, USER_A, "up")
    counts = ledger.apply_vote(test_post.id, USER_A, "up")

    assert (counts.upvotes, counts.downvotes) == (1, 0)
    assert not counts.changed


def test_clear_removes_the_vote(ledger, test_post) -> None:
    ledger.apply_vote(test_post.id, USER_A, "down")
    counts = ledger.apply_vote(test_post.id, USER_A, "clear")

    assert (counts.upvotes, counts.downvotes) == (0, 0)
    assert counts.direction is None
    assert ledger.snapshot(test_post.id).voted_users == frozenset()


def test_clear_without_a_vote_is_a_no_op(ledger, test_post) -> None:
    counts = ledger.apply_vote(test_post.id, USER_A, "clear")

    assert (counts.upvotes, counts.downvotes) == (0, 0)
    assert not counts.changed


def test_last_direction_wins_over_a_sequence(ledger, test_post) -> None:
    for direction in ("up", "down", "up", "up", "clear", "down"):
        ledger.apply_vote(test_post.id, USER_A, direction)

    assert ledger.current_direction(test_post.id, USER_A) == "down"
    snapshot = ledger.snapshot(test_post.id)
    assert (snapshot.upvotes, snapshot.downvotes) == (0, 1)
    _assert_consistent(ledger, test_post.id)


def test_many_users_keep_counters_consistent(ledger, test_post) -> None:
    for index in range(12):
        ledger.apply_vote(test_post.id, f"u{index}", "up" if index % 3 else "down")
    for index in range(0, 12, 2):
        ledger.apply_vote(test_post.id, f"u{index}", "down")

    _assert_consistent(ledger, test_post.id)
    snapshot = ledger.snapshot(test_post.id)
    assert snapshot.upvotes + snapshot.downvotes == 12


def test_stale_expected_state_raises_conflict(ledger, test_post) -> None:
    ledger.apply_vote(test_post.id, USER_A, "up")

    # A request that read "no vote" before the upvote landed.
    with pytest.raises(ConflictError):
        ledger.commit_vote(test_post.id, USER_A, "down", expected=None)

    snapshot = ledger.snapshot(test_post.id)
    assert (snapshot.upvotes, snapshot.downvotes) == (1, 0)
    _assert_consistent(ledger, test_post.id)


def test_stale_switch_raises_conflict(ledger, test_post) -> None:
    ledger.apply_vote(test_post.id, USER_A, "down")

    with pytest.raises(ConflictError):
        ledger.commit_vote(test_post.id, USER_A, "up", expected="up")

    assert ledger.current_direction(test_post.id, USER_A) == "down"
    _assert_consistent(ledger, test_post.id)


def test_retry_recovers_from_a_conflict(ledger, test_post, mocker) -> None:
    real_commit = ledger.commit_vote
    calls = []

    def _flaky_commit(*args, **kwargs):
        calls.append(args)
        if len(calls) == 1:
            raise ConflictError("raced")
        return real_commit(*args, **kwargs)

    mocker.patch.object(ledger, "commit_vote", side_effect=_flaky_commit)

    counts = apply_vote_with_retry(ledger, test_post.id, USER_A, "up", attempts=2)

    assert counts.upvotes == 1
    assert len(calls) == 2


def test_retry_gives_up_after_attempts(ledger, test_post, mocker) -> None:
    mocker.patch.object(ledger, "commit_vote", side_effect=ConflictError("raced"))

    with pytest.raises(ConflictError):
        apply_vote_with_retry(ledger, test_post.id, USER_A, "up", attempts=3)

    assert ledger.commit_vote.call_count == 3


def test_authors_cannot_vote_on_their_own_posts(ledger, test_post) -> None:
    with pytest.raises(AuthorizationError):
        ledger.apply_vote(test_post.id, OTHER_ID, "up")


def test_self_votes_can_be_enabled(db_session, test_post) -> None:
    counts = VoteLedger(db_session, allow_self_votes=True).apply_vote(
        test_post.id, OTHER_ID, "up"
    )
    assert counts.upvotes == 1


def test_missing_post(ledger) -> None:
    with pytest.raises(NotFoundError):
        ledger.apply_vote(424242, USER_A, "up")


def test_hidden_post_cannot_be_voted_on(ledger, make_post) -> None:
    post = make_post(visibility="moderators")
    member = AccessContext(user_id=USER_A, email="a@campus.edu")

    with pytest.raises(NotFoundError):
        ledger.apply_vote(post.id, USER_A, "up", ctx=member)


def test_superseded_request_is_discarded(ledger, test_post) -> None:
    ledger.apply_vote(test_post.id, USER_A, "down", client_seq=5)
    counts = ledger.apply_vote(test_post.id, USER_A, "up", client_seq=4)

    assert counts.superseded
    assert counts.direction == "down"
    assert (counts.upvotes, counts.downvotes) == (0, 1)


def test_newer_sequence_is_applied(ledger, test_post) -> None:
    ledger.apply_vote(test_post.id, USER_A, "down", client_seq=1)
    counts = ledger.apply_vote(test_post.id, USER_A, "up", client_seq=2)

    assert not counts.superseded
    assert counts.direction == "up"
