"""
Conversation model.

A "simple" conversation is one started by posting a comment directly on a
project wall; it exists only to hold that thread and goes away with its last
comment.
"""

from sqlalchemy import Boolean, String, false
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel
from pytrack.models.target import PrivacyMixin, TargetMixin, WatchableMixin


class Conversation(PrivacyMixin, WatchableMixin, TargetMixin, SoftDeleteModel):
    """Discussion thread."""

    __tablename__: str = "conversations"  # type: ignore[assignment]

    name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    simple: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Conversation {self.name or self.id}>"
