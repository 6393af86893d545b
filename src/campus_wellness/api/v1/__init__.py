"""Version 1 API endpoints."""

from .endpoints import (
    access_router,
    complaints_router,
    departments_router,
    mind_wall_router,
    moderators_router,
    posts_router,
    votes_router,
)

__all__ = [
    "access_router",
    "complaints_router",
    "departments_router",
    "mind_wall_router",
    "moderators_router",
    "posts_router",
    "votes_router",
]
