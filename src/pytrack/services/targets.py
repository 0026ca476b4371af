"""Lookup and persistence of polymorphic comment targets."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.core.exceptions import TargetNotFoundError, UnknownTargetTypeError
from pytrack.models.conversation import Conversation
from pytrack.models.page import Page
from pytrack.models.target import TargetKind, TargetMixin
from pytrack.models.task import Task
from pytrack.models.task_list import TaskList

TARGET_MODELS: dict[TargetKind, type[TargetMixin]] = {
    TargetKind.TASK: Task,
    TargetKind.CONVERSATION: Conversation,
    TargetKind.TASK_LIST: TaskList,
    TargetKind.PAGE: Page,
}


class TargetRegistry:
    """Maps stored ``target_type`` names to target models."""

    def __init__(self, models: Optional[dict[TargetKind, type[TargetMixin]]] = None) -> None:
        self.models = dict(models or TARGET_MODELS)

    def kind_of(self, target: TargetMixin) -> TargetKind:
        return self._kind(target.target_type)

    def model_for(self, target_type: str) -> type[TargetMixin]:
        return self.models[self._kind(target_type)]

    def _kind(self, target_type: str) -> TargetKind:
        try:
            kind = TargetKind(target_type)
        except ValueError as e:
            raise UnknownTargetTypeError(target_type) from e
        if kind not in self.models:
            raise UnknownTargetTypeError(target_type)
        return kind

    async def find(
        self,
        db: AsyncSession,
        target_type: str,
        target_id: Optional[str],
    ) -> Optional[TargetMixin]:
        """Get a target by type and ID, including soft-deleted ones."""
        model = self.model_for(target_type)
        if not target_id:
            return None
        return await db.get(model, target_id)

    async def load(
        self,
        db: AsyncSession,
        target_type: str,
        target_id: Optional[str],
    ) -> TargetMixin:
        """Get a live target.

        Raises:
            UnknownTargetTypeError: If comments cannot be attached to target_type
            TargetNotFoundError: If the target does not exist or was deleted
        """
        target = await self.find(db, target_type, target_id)
        if target is None or target.is_deleted:
            raise TargetNotFoundError(target_type, target_id)
        return target

    async def save(self, db: AsyncSession, target: TargetMixin) -> None:
        """Write pending target changes. No target-level validation runs here."""
        db.add(target)
        await db.flush()
