"""Upload model - a file attached to a comment."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pytrack.db.base import BaseModel, uuid_column

if TYPE_CHECKING:
    from pytrack.models.comment import Comment


class Upload(BaseModel):
    """
    Uploaded file metadata.

    The file itself lives in external storage; only its name, size and
    content type are tracked here.
    """

    __tablename__: str = "uploads"  # type: ignore[assignment]

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

    asset_file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    asset_file_size: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    asset_content_type: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    comment: Mapped["Comment | None"] = relationship(
        "Comment",
        back_populates="uploads",
    )

    def __repr__(self) -> str:
        return f"<Upload {self.asset_file_name}>"

    @property
    def signature(self) -> str:
        """Identity used when comparing the attachments of two comments."""
        size = "" if self.asset_file_size is None else str(self.asset_file_size)
        return f"{self.asset_file_name}_{size}"
