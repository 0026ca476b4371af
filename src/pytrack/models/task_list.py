"""Task list model - groups tasks; watchable but never private."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel
from pytrack.models.target import TargetMixin, WatchableMixin


class TaskList(WatchableMixin, TargetMixin, SoftDeleteModel):
    """Ordered group of tasks."""

    __tablename__: str = "task_lists"  # type: ignore[assignment]

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TaskList {self.name}>"
