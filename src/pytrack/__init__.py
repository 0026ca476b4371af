"""
PyTrack - comment pipeline for a collaboration/project-tracking application.

Comments attach polymorphically to tasks, conversations and other project
objects. This package implements their validation, ownership/privacy
inheritance, duplicate detection and the create/destroy side effects.
"""

__version__ = "0.1.0"
__author__ = "PyTrack Team"
__license__ = "MIT"

__all__ = ["__version__"]
