"""Schemas for PyTrack."""

from pytrack.schemas import comment

__all__ = ["comment"]
