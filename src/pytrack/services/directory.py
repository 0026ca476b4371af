"""Author and assignee lookups that still see soft-deleted rows."""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.models.comment import Comment
from pytrack.models.person import Person
from pytrack.models.user import User


@dataclass(frozen=True)
class ResolvedComment:
    """A comment together with its author and responsible people."""

    comment: Comment
    user: Optional[User]
    assigned: Optional[Person]
    previous_assigned: Optional[Person]


class UserDirectory:
    """
    Primary-key lookups for users and people.

    Deleted users keep authoring their old comments, so these lookups never
    filter on ``deleted_at``.
    """

    async def find_user_including_deleted(
        self,
        db: AsyncSession,
        user_id: Optional[str],
    ) -> Optional[User]:
        if not user_id:
            return None
        return await db.get(User, user_id)

    async def find_person_including_deleted(
        self,
        db: AsyncSession,
        person_id: Optional[str],
    ) -> Optional[Person]:
        if not person_id:
            return None
        return await db.get(Person, person_id)

    async def resolve_people(self, db: AsyncSession, comment: Comment) -> ResolvedComment:
        """Look up author, assignee and previous assignee once."""
        return ResolvedComment(
            comment=comment,
            user=await self.find_user_including_deleted(db, comment.user_id),
            assigned=await self.find_person_including_deleted(db, comment.assigned_id),
            previous_assigned=await self.find_person_including_deleted(
                db, comment.previous_assigned_id
            ),
        )
