"""Service layer modules."""

from pytrack.services.activity import ActivityLogService
from pytrack.services.comment import CommentCreation, CommentDraft, CommentService
from pytrack.services.context import CommentContext
from pytrack.services.directory import ResolvedComment, UserDirectory
from pytrack.services.duplicates import DuplicateDetector
from pytrack.services.ownership import Ownership, OwnershipResolver, can_change_privacy
from pytrack.services.targets import TargetRegistry
from pytrack.services.watchers import WatcherFanout, WatcherService

__all__ = [
    "ActivityLogService",
    "CommentContext",
    "CommentCreation",
    "CommentDraft",
    "CommentService",
    "DuplicateDetector",
    "Ownership",
    "OwnershipResolver",
    "ResolvedComment",
    "TargetRegistry",
    "UserDirectory",
    "WatcherFanout",
    "WatcherService",
    "can_change_privacy",
]
