"""
SQLAlchemy Base class and common model mixins.

All models should inherit from Base to be included in migrations.
Ids are stored with the generic ``Uuid`` type, so the same models run on
PostgreSQL (native UUID) and on SQLite in tests.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.sql.expression import ColumnElement


def generate_uuid() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def uuid_column() -> Uuid:
    """UUID column type holding string values."""
    return Uuid(as_uuid=False)


def tableize(class_name: str) -> str:
    """``TaskList`` -> ``task_lists``."""
    result = [class_name[0].lower()]
    for char in class_name[1:]:
        if char.isupper():
            result.extend(["_", char.lower()])
        else:
            result.append(char)
    return "".join(result) + "s"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    type_annotation_map = {
        str: String,
    }

    @declared_attr.directive
    @classmethod
    def __tablename__(cls) -> str:
        return tableize(cls.__name__)


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamps.

    Both are filled in Python on insert, so they are readable right after a
    flush. An explicitly assigned ``updated_at`` wins over the update default.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )


class UUIDMixin:
    """Mixin that adds a UUID primary key."""

    id: Mapped[str] = mapped_column(
        uuid_column(),
        primary_key=True,
        default=generate_uuid,
        nullable=False,
    )


class SoftDeleteMixin:
    """
    Mixin that adds soft delete functionality.

    Rows are never removed; ``deleted_at`` marks them gone. Lookups by primary
    key still return deleted rows, list queries filter with ``active()``.
    """

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=None,
        nullable=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utc_now()

    @classmethod
    def active(cls) -> ColumnElement[bool]:
        """Criterion matching rows that are not soft-deleted."""
        return cls.deleted_at.is_(None)


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """Abstract base model with UUID primary key and timestamps."""

    __abstract__ = True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class SoftDeleteModel(BaseModel, SoftDeleteMixin):
    """Abstract base model for rows that are kept after deletion."""

    __abstract__ = True
