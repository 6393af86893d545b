# src/campus_wellness/models/__init__.py
"""SQLAlchemy models for the Campus Wellness application."""

from .authority import AdminRecord, ModeratorRecord
from .complaint import AnonymousComplaint, ComplaintTransition, DepartmentComplaint
from .department import Department
from .mind_wall import MindWallIssue, MindWallVote
from .post import ActivityParticipant, Post, PostComment
from .sequence import ActionSequence
from .vote import PostVote

__all__ = [
    "AdminRecord", "ModeratorRecord",
    "AnonymousComplaint", "ComplaintTransition", "DepartmentComplaint",
    "Department",
    "MindWallIssue", "MindWallVote",
    "ActivityParticipant", "Post", "PostComment",
    "ActionSequence",
    "PostVote",
]
