"""
Watcher storage and the fan-out of a new comment onto its target.

Fan-out runs once, right after a comment is created, and never on update.
It is a read-modify-write of the target without locking; concurrent comments
on the same target resolve as last writer wins.
"""

from collections.abc import Iterable
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.core.logging import get_logger
from pytrack.models.comment import Comment
from pytrack.models.target import TargetMixin
from pytrack.models.watcher import Watcher
from pytrack.services.context import CommentContext
from pytrack.services.ownership import can_change_privacy
from pytrack.services.targets import TargetRegistry

logger = get_logger(__name__)


def _unique(user_ids: Iterable[Optional[str]]) -> list[str]:
    seen: dict[str, None] = {}
    for user_id in user_ids:
        if user_id:
            seen.setdefault(user_id, None)
    return list(seen)


class WatcherService:
    """Service for target watcher lists."""

    async def watcher_ids(self, db: AsyncSession, target: TargetMixin) -> list[str]:
        result = await db.execute(
            select(Watcher.user_id).where(
                Watcher.target_type == target.target_type,
                Watcher.target_id == target.id,
            )
        )
        return list(result.scalars().all())

    async def add_watchers(
        self,
        db: AsyncSession,
        target: TargetMixin,
        user_ids: Iterable[Optional[str]],
    ) -> list[str]:
        """Add users to the watcher list, keeping existing watchers.

        Returns:
            IDs of the users that were not watching before

        """
        existing = set(await self.watcher_ids(db, target))
        added = [user_id for user_id in _unique(user_ids) if user_id not in existing]
        for user_id in added:
            db.add(Watcher(target_type=target.target_type, target_id=target.id, user_id=user_id))
        if added:
            await db.flush()
        return added

    async def set_private_watchers(
        self,
        db: AsyncSession,
        target: TargetMixin,
        user_ids: Iterable[Optional[str]],
    ) -> list[str]:
        """Replace the watcher list with exactly ``user_ids``.

        Returns:
            The new watcher IDs

        """
        wanted = _unique(user_ids)
        await db.execute(
            delete(Watcher).where(
                Watcher.target_type == target.target_type,
                Watcher.target_id == target.id,
                Watcher.user_id.not_in(wanted),
            )
        )
        await self.add_watchers(db, target, wanted)
        return wanted


class WatcherFanout:
    """Applies a newly created comment to its target."""

    def __init__(
        self,
        watchers: Optional[WatcherService] = None,
        targets: Optional[TargetRegistry] = None,
    ) -> None:
        self.watchers = watchers or WatcherService()
        self.targets = targets or TargetRegistry()

    async def apply(
        self,
        db: AsyncSession,
        comment: Comment,
        target: TargetMixin,
        context: CommentContext,
    ) -> None:
        """Propagate privacy, watchers and the last-update time to the target.

        Args:
            db: Database session
            comment: The comment that was just created
            target: Object the comment was posted on
            context: Flags of the current request

        """
        if target.supports_watchers:
            await self._update_watchers(db, comment, target, context)

        target.updated_at = comment.created_at
        await self.targets.save(db, target)

    async def _update_watchers(
        self,
        db: AsyncSession,
        comment: Comment,
        target: TargetMixin,
        context: CommentContext,
    ) -> None:
        if target.supports_privacy:
            can_change = can_change_privacy(comment.user_id, target)
            if can_change:
                target.is_private = comment.is_private

            if (
                target.is_private
                and can_change
                and context.private_ids is not None
                and context.is_private_set
            ):
                await self.watchers.set_private_watchers(db, target, context.private_ids)
                logger.debug(
                    "Replaced watchers of private target",
                    extra={"thread_id": comment.thread_id, "watchers": len(context.private_ids)},
                )
            elif target.is_private:
                await self.watchers.add_watchers(db, target, [target.user_id])

        if not (target.supports_privacy and target.is_private):
            await self.watchers.add_watchers(
                db, target, [*context.mentioned_user_ids, comment.user_id]
            )
