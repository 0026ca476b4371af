"""Watcher model - users notified about activity on a target."""

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import BaseModel, uuid_column


class Watcher(BaseModel):
    """A user watching a task, conversation or other watchable target."""

    __tablename__: str = "watchers"  # type: ignore[assignment]

    target_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    target_id: Mapped[str] = mapped_column(
        uuid_column(),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        uuid_column(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("target_type", "target_id", "user_id", name="uq_watchers_target_user"),
        Index("ix_watchers_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<Watcher {self.user_id} on {self.target_type} {self.target_id}>"
