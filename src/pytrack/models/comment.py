"""
Comment model - free-text updates attached to tasks, conversations and
other project objects.

A comment may also log time (``hours``), carry uploads and linked
documents, reassign the responsible person and toggle the privacy of its
target. Which object it belongs to is a polymorphic reference
(``target_type`` + ``target_id``) resolved through the target registry.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, String, Text, and_, false
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql.expression import ColumnElement, UnaryExpression

from pytrack.core.duration import parse_duration
from pytrack.db.base import SoftDeleteModel, tableize, uuid_column
from pytrack.models.target import TargetKind

if TYPE_CHECKING:
    from pytrack.models.linked_document import LinkedDocument
    from pytrack.models.upload import Upload

# Two consecutive comments by the same user are duplicates when these match
DUPLICATE_FIELDS = ("body", "assigned_id", "status", "hours")


class Comment(SoftDeleteModel):
    """Comment on a target object."""

    __tablename__: str = "comments"  # type: ignore[assignment]

    # Polymorphic target
    target_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    target_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        nullable=True,
    )

    # Ownership
    user_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Responsible person (task reassignment)
    assigned_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("people.id"),
        nullable=True,
    )
    previous_assigned_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("people.id"),
        nullable=True,
    )

    # Content
    body: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    body_html: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Time tracking and classification
    hours: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    status: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    billable: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )
    is_private: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )

    # Attachments
    uploads: Mapped[list["Upload"]] = relationship(
        "Upload",
        back_populates="comment",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Upload.created_at",
    )
    linked_documents: Mapped[list["LinkedDocument"]] = relationship(
        "LinkedDocument",
        back_populates="comment",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="LinkedDocument.created_at",
    )

    __table_args__ = (
        Index("ix_comments_target", "target_type", "target_id"),
        Index("ix_comments_target_user_created", "target_type", "target_id", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id} by user {self.user_id} on {self.thread_id}>"

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def is_task_comment(self) -> bool:
        return self.target_type == TargetKind.TASK.value

    @property
    def has_hours(self) -> bool:
        """True when time was logged (zero hours does not count)."""
        return bool(self.hours and self.hours > 0)

    @property
    def human_hours(self) -> float | None:
        return self.hours

    @human_hours.setter
    def human_hours(self, duration: str | float | None) -> None:
        self.hours = parse_duration(duration)

    @property
    def thread_id(self) -> str:
        return f"{self.target_type}_{self.target_id}"

    @property
    def has_attachments(self) -> bool:
        return bool(self.uploads) or bool(self.linked_documents)

    def upload_signatures(self) -> list[str]:
        """Sorted ``<file name>_<file size>`` of every upload."""
        return sorted(upload.signature for upload in self.uploads)

    def duplicate_of(self, other: "Comment") -> bool:
        """Same body, assignee, status and hours as ``other``."""
        return all(getattr(self, field) == getattr(other, field) for field in DUPLICATE_FIELDS)

    def references(self) -> dict[str, list[Any]]:
        """Ids of related objects grouped by kind, for bulk preloading."""
        refs: dict[str, list[Any]] = {
            "users": [self.user_id],
            "projects": [self.project_id],
        }
        if self.target_type:
            refs[tableize(self.target_type)] = [self.target_id]
        refs["people"] = [
            person_id
            for person_id in (self.assigned_id, self.previous_assigned_id)
            if person_id
        ]
        return refs

    # -------------------------------------------------------------------------
    # Query criteria
    # -------------------------------------------------------------------------

    @classmethod
    def for_target(cls, target_type: str, target_id: str) -> ColumnElement[bool]:
        return and_(cls.target_type == target_type, cls.target_id == target_id)

    @classmethod
    def by_user(cls, user_id: str) -> ColumnElement[bool]:
        return cls.user_id == user_id

    @classmethod
    def with_hours(cls) -> ColumnElement[bool]:
        return cls.hours > 0

    @classmethod
    def latest(cls) -> tuple[UnaryExpression, ...]:
        """Most recent first."""
        return (cls.created_at.desc(), cls.id.desc())
