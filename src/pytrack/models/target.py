"""
Comment target capabilities.

Any model a comment can be attached to mixes in ``TargetMixin``. What the
comment pipeline may do to a target is declared by the capability mixins
rather than discovered at runtime:

- ``PrivacyMixin``: the target has an ``is_private`` flag that comments
  inherit and that the target's owner may change through a comment.
- ``WatchableMixin``: the target keeps a watcher list that new comments
  extend.

Capability mixins must come before ``TargetMixin`` in the base class list.
"""

import enum
from typing import ClassVar

from sqlalchemy import Boolean, ForeignKey, Integer, false
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import uuid_column


class TargetKind(str, enum.Enum):
    """Object types comments can be attached to."""

    TASK = "Task"
    CONVERSATION = "Conversation"
    TASK_LIST = "TaskList"
    PAGE = "Page"


class TargetMixin:
    """Columns and defaults shared by every comment target."""

    supports_privacy: ClassVar[bool] = False
    supports_watchers: ClassVar[bool] = False

    user_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    comments_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )

    @property
    def target_type(self) -> str:
        """Polymorphic type name stored on comments."""
        return type(self).__name__


class PrivacyMixin:
    """Target whose privacy is inherited by, and changeable through, comments."""

    supports_privacy: ClassVar[bool] = True

    is_private: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )


class WatchableMixin:
    """Target that keeps a list of watching users."""

    supports_watchers: ClassVar[bool] = True
