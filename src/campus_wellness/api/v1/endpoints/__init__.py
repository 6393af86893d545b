"""API endpoint modules for version 1."""

from .access import router as access_router
from .complaints import router as complaints_router
from .departments import router as departments_router
from .mind_wall import router as mind_wall_router
from .moderators import router as moderators_router
from .posts import router as posts_router
from .votes import router as votes_router

__all__ = [
    "access_router",
    "complaints_router",
    "departments_router",
    "mind_wall_router",
    "moderators_router",
    "posts_router",
    "votes_router",
]
