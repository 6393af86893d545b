"""mind wall

Revision ID: 8d41e6a0c3b2
Revises: 5b2f0c9d1e47
Create Date: 2026-10-19 14:03:27.905117

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8d41e6a0c3b2"
down_revision: Union[str, Sequence[str], None] = "5b2f0c9d1e47"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the Mind Wall issue and vote tables."""
    op.create_table(
        "mind_wall_issue",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("author_id", sa.String(length=128), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=True),
        sa.Column("is_anonymous", sa.Boolean(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False),
        sa.Column("downvotes", sa.Integer(), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_by", sa.String(length=128), nullable=True),
        sa.CheckConstraint(
            "status IN ('open', 'in_progress', 'resolved', 'closed')",
            name="ck_mind_wall_issue_status",
        ),
        sa.CheckConstraint(
            "severity IN ('Low', 'Medium', 'High', 'Critical')",
            name="ck_mind_wall_issue_severity",
        ),
        sa.CheckConstraint(
            "upvotes >= 0 AND downvotes >= 0", name="ck_mind_wall_issue_counters"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mind_wall_issue_created_at", "mind_wall_issue", ["created_at"])

    op.create_table(
        "mind_wall_vote",
        sa.Column("issue_id", sa.Integer(), nullable=False),
        sa.Column("voter_user_id", sa.String(length=128), nullable=False),
        sa.Column("direction", sa.SmallInteger(), nullable=False),
        sa.CheckConstraint("direction IN (1, -1)", name="ck_mind_wall_vote_direction"),
        sa.ForeignKeyConstraint(["issue_id"], ["mind_wall_issue.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("issue_id", "voter_user_id"),
    )
    op.create_index("ix_mind_wall_vote_issue_id", "mind_wall_vote", ["issue_id"])


def downgrade() -> None:
    """Drop the Mind Wall tables."""
    op.drop_index("ix_mind_wall_vote_issue_id", table_name="mind_wall_vote")
    op.drop_table("mind_wall_vote")
    op.drop_index("ix_mind_wall_issue_created_at", table_name="mind_wall_issue")
    op.drop_table("mind_wall_issue")
