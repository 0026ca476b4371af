"""Page model - a wiki-style page; comments attach without watchers or privacy."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel
from pytrack.models.target import TargetMixin


class Page(TargetMixin, SoftDeleteModel):
    """Project page."""

    __tablename__: str = "pages"  # type: ignore[assignment]

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Page {self.name}>"
