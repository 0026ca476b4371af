"""
Person model - a user's membership in a project.

Comments reassign work between people rather than users, so the responsible
person survives a user leaving the project (the row is soft-deleted).
"""

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel, uuid_column


class Person(SoftDeleteModel):
    """Project member."""

    __tablename__: str = "people"  # type: ignore[assignment]

    project_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (Index("ix_people_project_user", "project_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<Person {self.id} user={self.user_id} project={self.project_id}>"
