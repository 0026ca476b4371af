"""Database layer for PyTrack."""

from pytrack.db.base import Base, BaseModel, SoftDeleteModel

__all__ = [
    "Base",
    "BaseModel",
    "SoftDeleteModel",
]
