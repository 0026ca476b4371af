"""
Activity model - entries of the project activity feed.

An activity points at the object it reports on (``target_type`` +
``target_id``); for comments it also records what the comment was posted on.
"""

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import BaseModel, uuid_column


class Activity(BaseModel):
    """Activity feed entry."""

    __tablename__: str = "activities"  # type: ignore[assignment]

    project_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("users.id"),
        nullable=True,
    )
    action: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    target_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    target_id: Mapped[str] = mapped_column(
        uuid_column(),
        nullable=False,
    )
    comment_target_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    comment_target_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        nullable=True,
    )

    __table_args__ = (Index("ix_activities_target", "target_type", "target_id"),)

    def __repr__(self) -> str:
        return f"<Activity {self.action} {self.target_type} {self.target_id}>"
