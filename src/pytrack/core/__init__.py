"""Core configuration and utilities for PyTrack."""

from pytrack.core.config import settings
from pytrack.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
