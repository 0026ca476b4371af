"""
Detection of accidental double submissions.

A new comment is rejected when it repeats the previous comment the same user
left on the same target: same body, assignee, status and hours, and the same
set of uploaded files. The previous comment is looked up through the target's
own comment list, not across all comments.

Two concurrent submissions of the same comment are not guarded against; both
may pass this check.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.models.comment import Comment
from pytrack.models.target import TargetMixin


class DuplicateDetector:
    """Compares a new comment with the user's previous one on the same target."""

    def should_check(
        self,
        comment: Comment,
        target: Optional[TargetMixin],
        is_importing: bool,
    ) -> bool:
        """Imports, comments without a target and comments logging time are never checked."""
        return not is_importing and target is not None and not comment.has_hours

    async def find_preceding(
        self,
        db: AsyncSession,
        comment: Comment,
        target: TargetMixin,
    ) -> Optional[Comment]:
        """Most recent live comment by the same user on the target."""
        query = (
            select(Comment)
            .where(
                Comment.for_target(target.target_type, target.id),
                Comment.by_user(comment.user_id),
                Comment.active(),
            )
            .order_by(*Comment.latest())
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalars().first()

    def is_duplicate(
        self,
        candidate: Comment,
        preceding: Optional[Comment],
        candidate_signatures: Optional[list[str]] = None,
    ) -> bool:
        """Whether ``candidate`` repeats ``preceding``.

        Args:
            candidate: Comment being created
            preceding: Previous comment by the same user on the same target
            candidate_signatures: Upload signatures of the candidate when some
                of its uploads are not attached yet

        """
        if preceding is None or not preceding.duplicate_of(candidate):
            return False
        if candidate_signatures is None:
            candidate_signatures = candidate.upload_signatures()
        return sorted(candidate_signatures) == preceding.upload_signatures()
