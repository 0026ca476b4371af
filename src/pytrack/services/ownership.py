"""
Ownership and privacy inheritance from a comment's target.

Runs while a new comment is validated, before presence checks and duplicate
detection, which both rely on the inherited ``user_id``.
"""

from dataclasses import dataclass
from typing import Optional

from pytrack.models.comment import Comment
from pytrack.models.target import TargetMixin


def can_change_privacy(user_id: Optional[str], target: TargetMixin) -> bool:
    """Only the target's owner may change its privacy through a comment."""
    return user_id == target.user_id


@dataclass(frozen=True)
class Ownership:
    """Inherited comment fields."""

    user_id: Optional[str]
    project_id: Optional[str]
    is_private: bool


class OwnershipResolver:
    """Computes the fields a new comment inherits from its target."""

    def resolve(self, comment: Comment, target: TargetMixin, is_private_set: bool) -> Ownership:
        """Compute inherited fields without touching the comment.

        User and project are kept when already set. Privacy follows the
        target unless the target's owner explicitly chose a value.
        """
        user_id = comment.user_id or target.user_id
        project_id = comment.project_id or target.project_id
        is_private = bool(comment.is_private)

        if target.supports_privacy:
            if not (can_change_privacy(user_id, target) and is_private_set):
                is_private = bool(target.is_private)

        return Ownership(user_id=user_id, project_id=project_id, is_private=is_private)

    def apply(self, comment: Comment, target: TargetMixin, is_private_set: bool) -> Ownership:
        """Resolve and write the inherited fields onto the comment."""
        ownership = self.resolve(comment, target, is_private_set)
        comment.user_id = ownership.user_id
        comment.project_id = ownership.project_id
        comment.is_private = ownership.is_private
        return ownership
