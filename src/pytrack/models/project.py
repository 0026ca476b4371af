"""Project model - groups tasks, conversations and their comments."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel, uuid_column


class Project(SoftDeleteModel):
    """A project owned by a user."""

    __tablename__: str = "projects"  # type: ignore[assignment]

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    permalink: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
    )
    user_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Project {self.name}>"
