"""Data access helpers wrapping the SQLAlchemy session."""

from .authority_repo import AuthorityRepository
from .complaint_repo import ComplaintRepository
from .department_repo import DepartmentRepository
from .mind_wall_repo import MindWallRepository
from .post_repo import PostRepository

__all__ = [
    "AuthorityRepository",
    "ComplaintRepository",
    "DepartmentRepository",
    "MindWallRepository",
    "PostRepository",
]
