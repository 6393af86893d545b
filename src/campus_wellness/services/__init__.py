"""Business logic services for the campus wellness core."""

from .access import AccessContext, AccessContextCache, RoleResolver, get_access_cache
from .activities import ActivityCleanupWorker, ActivityService
from .complaints import ComplaintRouter
from .directory import DirectoryService
from .mind_wall import MindWallService
from .notifier import NotifierClient, get_notifier
from .posts import PostService
from .visibility import filter_visible, is_visible
from .vote_ledger import VoteLedger, apply_vote_with_retry

__all__ = [
    "AccessContext",
    "AccessContextCache",
    "ActivityCleanupWorker",
    "ActivityService",
    "ComplaintRouter",
    "DirectoryService",
    "MindWallService",
    "NotifierClient",
    "PostService",
    "RoleResolver",
    "VoteLedger",
    "apply_vote_with_retry",
    "filter_visible",
    "get_access_cache",
    "get_notifier",
    "is_visible",
]
