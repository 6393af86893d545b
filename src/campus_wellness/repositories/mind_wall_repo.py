"""Data access helpers for Mind Wall issues."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select, update

from campus_wellness.models import MindWallIssue, MindWallVote

from .vote_sets import VoteSetRepository

__all__ = ["MindWallRepository"]


class MindWallRepository(VoteSetRepository):
    """Issues on the Mind Wall and their vote sets. None of these methods commit."""

    target = MindWallIssue
    vote_model = MindWallVote
    target_key = "issue_id"
    label = "Issue"

    def list_recent(
        self,
        *,
        limit: int,
        status: str | None = None,
        before_id: int | None = None,
    ) -> list[MindWallIssue]:
        """Return non-deleted issues, newest first."""
        stmt = select(MindWallIssue).where(MindWallIssue.deleted.is_(False))
        if status is not None:
            stmt = stmt.where(MindWallIssue.status == status)
        if before_id is not None:
            stmt = stmt.where(MindWallIssue.id < before_id)
        stmt = stmt.order_by(MindWallIssue.id.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def create(self, **fields: Any) -> MindWallIssue:
        """Insert a new issue and return it."""
        issue = MindWallIssue(**fields)
        self.session.add(issue)
        self.session.flush()
        return issue

    def soft_delete(self, issue_id: int) -> bool:
        """Flag an issue as deleted; return False if it was already gone."""
        result = self.session.execute(
            update(MindWallIssue)
            .where(MindWallIssue.id == issue_id, MindWallIssue.deleted.is_(False))
            .values(deleted=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
