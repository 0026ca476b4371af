"""SQLAlchemy models for PyTrack."""

from pytrack.models.activity import Activity
from pytrack.models.comment import Comment
from pytrack.models.conversation import Conversation
from pytrack.models.linked_document import LinkedDocument
from pytrack.models.page import Page
from pytrack.models.person import Person
from pytrack.models.project import Project
from pytrack.models.target import PrivacyMixin, TargetKind, TargetMixin, WatchableMixin
from pytrack.models.task import Task
from pytrack.models.task_list import TaskList
from pytrack.models.upload import Upload
from pytrack.models.user import User
from pytrack.models.watcher import Watcher

__all__ = [
    "Activity",
    "Comment",
    "Conversation",
    "LinkedDocument",
    "Page",
    "Person",
    "PrivacyMixin",
    "Project",
    "TargetKind",
    "TargetMixin",
    "Task",
    "TaskList",
    "Upload",
    "User",
    "WatchableMixin",
    "Watcher",
]
