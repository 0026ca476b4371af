"""Task model - a unit of work that collects comments as its history."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel, uuid_column
from pytrack.models.target import PrivacyMixin, TargetMixin, WatchableMixin


class Task(PrivacyMixin, WatchableMixin, TargetMixin, SoftDeleteModel):
    """
    Task model.

    Comments on a task may have an empty body: a status change, a
    reassignment or logged hours is a meaningful comment on its own.
    """

    __tablename__: str = "tasks"  # type: ignore[assignment]

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    status: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    assigned_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Task {self.name}>"
