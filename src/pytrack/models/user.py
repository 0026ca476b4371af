"""
User model.

Users author comments and own tasks, conversations and projects. Users are
soft-deleted so comments keep pointing at their author after removal.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from pytrack.db.base import SoftDeleteModel


class User(SoftDeleteModel):
    """User account."""

    __tablename__: str = "users"  # type: ignore[assignment]

    login: Mapped[str] = mapped_column(
        String(40),
        unique=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )

    __table_args__ = (Index("ix_users_login", "login"),)

    def __repr__(self) -> str:
        return f"<User {self.login}>"
