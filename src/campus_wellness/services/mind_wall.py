"""Mind Wall: issues raised by students and ranked by community votes.

Votes go through the same :class:`VoteLedger` as posts, over the
``mind_wall_vote`` table, so counters and voter sets stay in step here too.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from campus_wellness.core.errors import AuthorizationError, NotFoundError
from campus_wellness.core.security import Identity
from campus_wellness.db.time import utcnow
from campus_wellness.models import MindWallIssue
from campus_wellness.models.mind_wall import ISSUE_CLOSED, ISSUE_RESOLVED
from campus_wellness.repositories.mind_wall_repo import MindWallRepository
from campus_wellness.schemas.mind_wall import IssueCreate, IssueResponse
from campus_wellness.services.access import AccessContext
from campus_wellness.services.vote_ledger import (
    VoteCounts,
    VoteDirection,
    VoteLedger,
    apply_vote_with_retry,
)

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
_SETTLED = frozenset({ISSUE_RESOLVED, ISSUE_CLOSED})


class MindWallService:
    """Raise, vote on, settle and remove Mind Wall issues."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.repo = MindWallRepository(session)
        self.ledger = VoteLedger(session, repo=self.repo, scope="mind-wall")

    def raise_issue(self, data: IssueCreate, identity: Identity) -> MindWallIssue:
        issue = self.repo.create(
            author_id=identity.user_id,
            author_name=None if data.is_anonymous else identity.name,
            is_anonymous=data.is_anonymous,
            title=data.title,
            description=data.description,
            category=data.category,
            severity=data.severity,
        )
        self.session.commit()
        logger.info("Mind Wall issue %s raised (%s)", issue.id, issue.category)
        return issue

    def get_issue(self, issue_id: int) -> MindWallIssue:
        issue = self.repo.get_by_id(issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    def list_issues(
        self,
        *,
        limit: int = 20,
        status: str | None = None,
        before_id: int | None = None,
    ) -> list[MindWallIssue]:
        """Return the newest issues."""
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        return self.repo.list_recent(limit=limit, status=status, before_id=before_id)

    def vote(
        self,
        issue_id: int,
        direction: VoteDirection,
        ctx: AccessContext,
        *,
        client_seq: int | None = None,
    ) -> VoteCounts:
        """Cast, switch or clear the caller's vote; authors cannot vote on their own issue."""
        return apply_vote_with_retry(
            self.ledger,
            issue_id,
            ctx.user_id,
            direction,
            ctx=ctx,
            client_seq=client_seq,
        )

    def set_status(self, issue_id: int, status: str, ctx: AccessContext) -> MindWallIssue:
        """Move an issue to ``status``; moderators and admins only."""
        if not ctx.can_moderate:
            raise AuthorizationError("Only moderators can change issue status")
        issue = self.get_issue(issue_id)
        now = utcnow()
        issue.status = status
        issue.updated_at = now
        if status in _SETTLED:
            issue.resolved_at = now
            issue.resolved_by = ctx.user_id
        else:
            issue.resolved_at = None
            issue.resolved_by = None
        self.session.commit()
        logger.info("Mind Wall issue %s set to %s by %s", issue_id, status, ctx.user_id)
        return issue

    def delete_issue(self, issue_id: int, ctx: AccessContext) -> None:
        """Remove an issue; its author, moderators and admins may."""
        issue = self.get_issue(issue_id)
        if issue.author_id != ctx.user_id and not ctx.can_moderate:
            raise AuthorizationError("Not allowed to delete this issue")
        if not self.repo.soft_delete(issue_id):
            raise NotFoundError("Issue not found")
        self.session.commit()
        logger.info("Mind Wall issue %s deleted by %s", issue_id, ctx.user_id)

    def to_response(self, issue: MindWallIssue, ctx: AccessContext) -> IssueResponse:
        response = IssueResponse.model_validate(issue)
        updates: dict[str, object] = {
            "my_vote": self.ledger.current_direction(issue.id, ctx.user_id)
        }
        if issue.is_anonymous and issue.author_id != ctx.user_id and not ctx.can_moderate:
            updates["author_id"] = None
        return response.model_copy(update=updates)
