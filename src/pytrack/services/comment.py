"""
Comment service - validation, creation side effects and destruction.

Creating a comment goes through three steps:

1. Building: attributes and nested attachments are assigned together.
2. Validating: ownership is inherited from the target, the body is
   formatted, then author presence, body presence and duplicate submission
   are checked. Every failing rule is reported in a single ValidationError
   and nothing is written.
3. Created: the row is written, then the activity entry and the target
   fan-out run once. Their failure is logged and does not undo the comment.

Updates re-format and re-check presence only. Deleting a comment removes
its activities and, for a simple conversation left without comments, the
conversation itself.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from pytrack.core.exceptions import CommentNotFoundError, ValidationError
from pytrack.core.formatting import format_body
from pytrack.core.logging import get_logger
from pytrack.models.activity import Activity
from pytrack.models.comment import Comment
from pytrack.models.target import TargetKind, TargetMixin
from pytrack.models.upload import Upload
from pytrack.schemas.comment import CommentCreate, CommentUpdate
from pytrack.services.activity import ActivityLogService
from pytrack.services.attachments import (
    assign_linked_documents,
    assign_uploads,
    claim_attachments,
    find_uploads,
)
from pytrack.services.context import CommentContext
from pytrack.services.directory import ResolvedComment, UserDirectory
from pytrack.services.duplicates import DuplicateDetector
from pytrack.services.ownership import OwnershipResolver
from pytrack.services.targets import TargetRegistry
from pytrack.services.watchers import WatcherFanout

logger = get_logger(__name__)

BLANK = "blank"
DUPLICATE = "duplicate"


def _error(field_name: str, code: str, message: str) -> dict[str, Any]:
    return {"field": field_name, "code": code, "message": message}


@dataclass
class CommentDraft:
    """A comment that has been built but not validated or written yet."""

    comment: Comment
    target: Optional[TargetMixin]
    context: CommentContext
    existing_uploads: list[Upload] = field(default_factory=list)

    @property
    def uploads(self) -> list[Upload]:
        """New uploads plus existing ones that will be attached on save."""
        return [*self.comment.uploads, *self.existing_uploads]

    @property
    def has_attachments(self) -> bool:
        return bool(self.uploads) or bool(self.comment.linked_documents)


@dataclass
class CommentCreation:
    """Result of creating a comment."""

    comment: Comment
    target: Optional[TargetMixin]
    activity: Optional[Activity]


class CommentService:
    """Service for comment operations."""

    def __init__(
        self,
        directory: Optional[UserDirectory] = None,
        activity_log: Optional[ActivityLogService] = None,
        targets: Optional[TargetRegistry] = None,
        ownership: Optional[OwnershipResolver] = None,
        duplicates: Optional[DuplicateDetector] = None,
        fanout: Optional[WatcherFanout] = None,
    ) -> None:
        self.directory = directory or UserDirectory()
        self.activity_log = activity_log or ActivityLogService()
        self.targets = targets or TargetRegistry()
        self.ownership = ownership or OwnershipResolver()
        self.duplicates = duplicates or DuplicateDetector()
        self.fanout = fanout or WatcherFanout(targets=self.targets)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def build_comment(
        self,
        db: AsyncSession,
        data: CommentCreate,
        user_id: Optional[str] = None,
        context: Optional[CommentContext] = None,
    ) -> CommentDraft:
        """Assign attributes and nested attachments to a new comment.

        Args:
            db: Database session
            data: Comment creation data
            user_id: Author; inherited from the target when omitted
            context: Request flags; derived from ``data`` when omitted

        Returns:
            Unsaved draft

        Raises:
            UnknownTargetTypeError: If comments cannot be attached to target_type
            TargetNotFoundError: If the target does not exist
            NotFoundError: If a nested entry references an unknown attachment

        """
        context = context or CommentContext.from_create(data)

        target = None
        if data.target_type is not None:
            target = await self.targets.load(db, data.target_type, data.target_id)

        comment = Comment(
            target_type=target.target_type if target is not None else None,
            target_id=target.id if target is not None else None,
            user_id=user_id,
            project_id=data.project_id,
            assigned_id=data.assigned_id,
            body=data.body,
            status=data.status,
            hours=data.hours,
            billable=data.billable,
            is_private=data.is_private,
        )
        existing_uploads = await find_uploads(db, data.upload_ids)
        assign_uploads(comment, data.uploads_attributes)
        assign_linked_documents(comment, data.linked_documents_attributes)

        return CommentDraft(
            comment=comment,
            target=target,
            context=context,
            existing_uploads=existing_uploads,
        )

    async def validate_comment(self, db: AsyncSession, draft: CommentDraft) -> None:
        """Derive inherited fields and check a draft.

        Raises:
            ValidationError: With one entry per failing rule

        """
        comment, target, context = draft.comment, draft.target, draft.context

        # Ownership must be known before any check below
        if target is not None:
            self.ownership.apply(comment, target, context.is_private_set)

        comment.body, comment.body_html = format_body(comment.body)

        errors = await self._presence_errors(db, comment, draft.has_attachments)

        if self.duplicates.should_check(comment, target, context.is_importing):
            preceding = await self.duplicates.find_preceding(db, comment, target)
            signatures = [upload.signature for upload in draft.uploads]
            if self.duplicates.is_duplicate(comment, preceding, signatures):
                errors.append(
                    _error("body", DUPLICATE, "is a duplicate of your previous comment")
                )

        if errors:
            logger.info(
                "Comment rejected",
                extra={
                    "thread_id": comment.thread_id,
                    "user_id": comment.user_id,
                    "errors": [f"{error['field']}.{error['code']}" for error in errors],
                },
            )
            raise ValidationError("Comment is invalid", errors=errors)

    async def create_comment(
        self,
        db: AsyncSession,
        data: CommentCreate,
        user_id: Optional[str] = None,
        is_importing: bool = False,
        mentioned_user_ids: Optional[list[str]] = None,
    ) -> CommentCreation:
        """Create a comment and apply its side effects.

        Args:
            db: Database session
            data: Comment creation data
            user_id: Author; inherited from the target when omitted
            is_importing: Bulk import; skips duplicate detection
            mentioned_user_ids: Users mentioned in the body

        Returns:
            Created comment, its target and the activity entry (if any)

        Raises:
            ValidationError: If the comment is invalid
            UnknownTargetTypeError: If comments cannot be attached to target_type
            TargetNotFoundError: If the target does not exist

        """
        context = CommentContext.from_create(
            data,
            is_importing=is_importing,
            mentioned_user_ids=mentioned_user_ids,
        )
        draft = await self.build_comment(db, data, user_id=user_id, context=context)
        await self.validate_comment(db, draft)

        comment, target = draft.comment, draft.target
        comment.uploads.extend(draft.existing_uploads)
        claim_attachments(comment)
        db.add(comment)
        await db.flush()
        if target is not None:
            await self._adjust_comments_count(db, target, 1)

        logger.info(
            "Comment created",
            extra={"comment_id": comment.id, "thread_id": comment.thread_id},
        )

        activity = await self._record_creation(db, comment)
        if target is not None:
            await self._fan_out(db, comment, target, context)

        await db.commit()
        await db.refresh(comment)
        return CommentCreation(comment=comment, target=target, activity=activity)

    async def _record_creation(self, db: AsyncSession, comment: Comment) -> Optional[Activity]:
        if not comment.project_id:
            return None
        try:
            async with db.begin_nested():
                return await self.activity_log.record(db, comment.project_id, comment, "create")
        except SQLAlchemyError:
            logger.exception(
                "Failed to record comment activity",
                extra={"comment_id": comment.id, "project_id": comment.project_id},
            )
            return None

    async def _fan_out(
        self,
        db: AsyncSession,
        comment: Comment,
        target: TargetMixin,
        context: CommentContext,
    ) -> None:
        try:
            async with db.begin_nested():
                await self.fanout.apply(db, comment, target, context)
        except SQLAlchemyError:
            logger.exception(
                "Failed to update comment target",
                extra={"comment_id": comment.id, "thread_id": comment.thread_id},
            )

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    async def update_comment(
        self,
        db: AsyncSession,
        comment_id: str,
        data: CommentUpdate,
    ) -> Comment:
        """Update a comment.

        Ownership, duplicate detection and target fan-out are not run again.

        Args:
            db: Database session
            comment_id: Comment ID
            data: Comment update data

        Returns:
            Updated comment

        Raises:
            CommentNotFoundError: If comment not found
            ValidationError: If the updated comment is invalid

        """
        comment = await self._get_active_comment(db, comment_id)

        for name in ("body", "status", "assigned_id", "hours"):
            if name in data.model_fields_set:
                setattr(comment, name, getattr(data, name))
        if data.billable is not None:
            comment.billable = data.billable

        comment.uploads.extend(await find_uploads(db, data.upload_ids, exclude=comment.uploads))
        assign_uploads(comment, data.uploads_attributes)
        assign_linked_documents(comment, data.linked_documents_attributes)
        claim_attachments(comment)

        comment.body, comment.body_html = format_body(comment.body)

        errors = await self._presence_errors(db, comment, comment.has_attachments)
        if errors:
            raise ValidationError("Comment is invalid", errors=errors)

        await db.commit()
        await db.refresh(comment)
        return comment

    # -------------------------------------------------------------------------
    # Destruction
    # -------------------------------------------------------------------------

    async def delete_comment(self, db: AsyncSession, comment_id: str) -> None:
        """Delete (soft delete) a comment and clean up after it.

        Args:
            db: Database session
            comment_id: Comment ID

        Raises:
            CommentNotFoundError: If comment not found

        """
        comment = await self._get_active_comment(db, comment_id)
        comment.soft_delete()

        target = None
        if comment.target_type:
            target = await self.targets.find(db, comment.target_type, comment.target_id)
        if target is not None:
            await self._adjust_comments_count(db, target, -1)
        await db.flush()

        removed = await self.activity_log.delete_all_for(db, "Comment", comment.id)
        logger.info(
            "Comment deleted",
            extra={"comment_id": comment.id, "activities_removed": removed},
        )

        if target is not None and await self._is_orphaned_simple_conversation(db, target):
            target.soft_delete()
            logger.info(
                "Removed simple conversation without comments",
                extra={"conversation_id": target.id},
            )

        await db.commit()

    async def _is_orphaned_simple_conversation(
        self,
        db: AsyncSession,
        target: TargetMixin,
    ) -> bool:
        if self.targets.kind_of(target) is not TargetKind.CONVERSATION:
            return False
        if not target.simple or target.is_deleted:
            return False
        return await self.count_comments(db, target.target_type, target.id) == 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_comment(self, db: AsyncSession, comment_id: str) -> ResolvedComment:
        """Get a comment with its author and responsible people resolved.

        Raises:
            CommentNotFoundError: If comment not found

        """
        comment = await self._get_active_comment(db, comment_id)
        return await self.directory.resolve_people(db, comment)

    async def list_comments(
        self,
        db: AsyncSession,
        target_type: str,
        target_id: str,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Comment], int]:
        """List live comments on a target, oldest first.

        Returns:
            Tuple of (comments, total count)

        """
        offset = (page - 1) * page_size
        total = await self.count_comments(db, target_type, target_id)

        query = (
            select(Comment)
            .where(Comment.for_target(target_type, target_id), Comment.active())
            .order_by(Comment.created_at, Comment.id)
            .offset(offset)
            .limit(page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def count_comments(self, db: AsyncSession, target_type: str, target_id: str) -> int:
        query = (
            select(func.count())
            .select_from(Comment)
            .where(Comment.for_target(target_type, target_id), Comment.active())
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def total_hours(self, db: AsyncSession, target_type: str, target_id: str) -> float:
        """Sum of hours logged on a target."""
        query = select(func.coalesce(func.sum(Comment.hours), 0.0)).where(
            Comment.for_target(target_type, target_id),
            Comment.with_hours(),
            Comment.active(),
        )
        result = await db.execute(query)
        return float(result.scalar() or 0.0)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _presence_errors(
        self,
        db: AsyncSession,
        comment: Comment,
        has_attachments: bool,
    ) -> list[dict[str, Any]]:
        errors: list[dict[str, Any]] = []

        user = await self.directory.find_user_including_deleted(db, comment.user_id)
        if user is None:
            errors.append(_error("user", BLANK, "can't be blank"))

        # Task comments may carry only a status change or hours
        if not comment.body and not (comment.is_task_comment or has_attachments):
            errors.append(_error("body", BLANK, "can't be blank"))

        return errors

    async def _get_active_comment(self, db: AsyncSession, comment_id: str) -> Comment:
        query = (
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.uploads), selectinload(Comment.linked_documents))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        comment = result.scalar_one_or_none()
        if not comment or comment.is_deleted:
            raise CommentNotFoundError(comment_id)
        return comment

    async def _adjust_comments_count(
        self,
        db: AsyncSession,
        target: TargetMixin,
        delta: int,
    ) -> None:
        """Move the target's comment counter (never below 0), keeping ``updated_at``."""
        model = type(target)
        count = max((target.comments_count or 0) + delta, 0)
        await db.execute(
            update(model)
            .where(model.id == target.id)
            .values(comments_count=count, updated_at=model.updated_at)
            .execution_options(synchronize_session=False)
        )
        set_committed_value(target, "comments_count", count)
