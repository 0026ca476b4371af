"""Activity feed writes for comments."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.models.activity import Activity
from pytrack.models.comment import Comment


class ActivityLogService:
    """Service for project activity feed entries."""

    async def record(
        self,
        db: AsyncSession,
        project_id: str,
        comment: Comment,
        action: str,
    ) -> Activity:
        """Log an action on a comment to its project's feed.

        Args:
            db: Database session
            project_id: Project whose feed gets the entry
            comment: Comment the action was performed on
            action: Action name, e.g. "create"

        Returns:
            Created activity

        """
        activity = Activity(
            project_id=project_id,
            user_id=comment.user_id,
            action=action,
            target_type="Comment",
            target_id=comment.id,
            comment_target_type=comment.target_type,
            comment_target_id=comment.target_id,
        )
        db.add(activity)
        await db.flush()
        return activity

    async def delete_all_for(self, db: AsyncSession, target_type: str, target_id: str) -> int:
        """Remove every activity reporting on the given object.

        Returns:
            Number of removed activities

        """
        result = await db.execute(
            delete(Activity).where(
                Activity.target_type == target_type,
                Activity.target_id == target_id,
            )
        )
        return result.rowcount or 0
