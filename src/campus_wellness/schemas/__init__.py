"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .access import AccessContextResponse
from .complaint import (
    AnonymousComplaintCreate,
    AnonymousComplaintResponse,
    DepartmentComplaintCreate,
    DepartmentComplaintResponse,
    StatusChange,
    TransitionResponse,
)
from .department import DepartmentCreate, DepartmentResponse, DepartmentUpdate
from .mind_wall import IssueCreate, IssueResponse, IssueStatusChange, IssueVote
from .moderator import ModeratorCreate, ModeratorResponse
from .post import CommentCreate, PostCreate, PostResponse
from .vote import VoteCountsResponse, VoteCreate

__all__ = [
    "AccessContextResponse",
    "AnonymousComplaintCreate", "AnonymousComplaintResponse",
    "DepartmentComplaintCreate", "DepartmentComplaintResponse",
    "StatusChange", "TransitionResponse",
    "DepartmentCreate", "DepartmentResponse", "DepartmentUpdate",
    "IssueCreate", "IssueResponse", "IssueStatusChange", "IssueVote",
    "ModeratorCreate", "ModeratorResponse",
    "CommentCreate", "PostCreate", "PostResponse",
    "VoteCountsResponse", "VoteCreate",
]
