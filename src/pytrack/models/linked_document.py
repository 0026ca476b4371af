"""Linked document model - an external document referenced by a comment."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pytrack.db.base import BaseModel, uuid_column

if TYPE_CHECKING:
    from pytrack.models.comment import Comment


class LinkedDocument(BaseModel):
    """Link to a hosted document (title + URL)."""

    __tablename__: str = "linked_documents"  # type: ignore[assignment]

    comment_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("users.id"),
        nullable=True,
    )
    project_id: Mapped[str | None] = mapped_column(
        uuid_column(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
    )

    comment: Mapped["Comment | None"] = relationship(
        "Comment",
        back_populates="linked_documents",
    )

    def __repr__(self) -> str:
        return f"<LinkedDocument {self.title}>"
