"""
Tests for the comment lifecycle.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.core.exceptions import (
    CommentNotFoundError,
    NotFoundError,
    TargetNotFoundError,
    UnknownTargetTypeError,
    ValidationError,
)
from pytrack.models.activity import Activity
from pytrack.models.comment import Comment
from pytrack.models.conversation import Conversation
from pytrack.models.page import Page
from pytrack.models.person import Person
from pytrack.models.project import Project
from pytrack.models.task import Task
from pytrack.models.task_list import TaskList
from pytrack.models.upload import Upload
from pytrack.models.user import User
from pytrack.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from pytrack.services.comment import CommentService
from pytrack.services.watchers import WatcherService


@pytest.fixture
def service() -> CommentService:
    return CommentService()


def on(target, **kwargs) -> CommentCreate:
    return CommentCreate(target_type=target.target_type, target_id=target.id, **kwargs)


async def count_rows(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar()


# =============================================================================
# Creation
# =============================================================================


@pytest.mark.asyncio
async def test_create_comment_on_task(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    other_user: User,
    test_task: Task,
) -> None:
    """A new comment records activity, adds watchers and touches its task."""
    result = await service.create_comment(
        db_session,
        on(test_task, body="  Started on **this**  "),
        user_id=other_user.id,
    )
    comment = result.comment

    assert comment.id is not None
    assert comment.body == "Started on **this**"
    assert "<strong>this</strong>" in comment.body_html
    assert comment.project_id == test_task.project_id
    assert comment.target_type == "Task"
    assert comment.thread_id == f"Task_{test_task.id}"

    assert result.activity is not None
    assert result.activity.action == "create"
    assert result.activity.target_type == "Comment"
    assert result.activity.target_id == comment.id
    assert result.activity.comment_target_type == "Task"
    assert result.activity.comment_target_id == test_task.id

    assert test_task.comments_count == 1
    await db_session.refresh(test_task)
    assert test_task.updated_at == comment.created_at

    watchers = await WatcherService().watcher_ids(db_session, test_task)
    assert watchers == [other_user.id]


@pytest.mark.asyncio
async def test_create_comment_inherits_author_from_target(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    result = await service.create_comment(db_session, on(test_conversation, body="Hello"))

    assert result.comment.user_id == test_user.id
    assert result.comment.project_id == test_conversation.project_id


@pytest.mark.asyncio
async def test_create_comment_adds_mentioned_watchers(
    db_session: AsyncSession,
    service: CommentService,
    other_user: User,
    third_user: User,
    test_conversation: Conversation,
) -> None:
    await service.create_comment(
        db_session,
        on(test_conversation, body="@observer have a look"),
        user_id=other_user.id,
        mentioned_user_ids=[third_user.id],
    )

    watchers = await WatcherService().watcher_ids(db_session, test_conversation)
    assert set(watchers) == {other_user.id, third_user.id}


@pytest.mark.asyncio
async def test_create_comment_without_target(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_project: Project,
) -> None:
    result = await service.create_comment(
        db_session,
        CommentCreate(body="Standalone note", project_id=test_project.id),
        user_id=test_user.id,
    )

    assert result.target is None
    assert result.comment.target_type is None
    assert result.activity is not None
    assert result.activity.comment_target_type is None


@pytest.mark.asyncio
async def test_create_comment_without_project_skips_activity(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
) -> None:
    result = await service.create_comment(
        db_session,
        CommentCreate(body="Private scribble"),
        user_id=test_user.id,
    )

    assert result.activity is None
    assert await count_rows(db_session, Activity) == 0


@pytest.mark.asyncio
async def test_create_comment_on_page_touches_page_only(
    db_session: AsyncSession,
    service: CommentService,
    other_user: User,
    test_page: Page,
) -> None:
    result = await service.create_comment(
        db_session,
        on(test_page, body="Typo in the second paragraph"),
        user_id=other_user.id,
    )

    assert test_page.comments_count == 1
    await db_session.refresh(test_page)
    assert test_page.updated_at == result.comment.created_at
    assert await WatcherService().watcher_ids(db_session, test_page) == []


@pytest.mark.asyncio
async def test_create_comment_on_task_list_adds_watcher(
    db_session: AsyncSession,
    service: CommentService,
    other_user: User,
    test_task_list: TaskList,
) -> None:
    await service.create_comment(
        db_session,
        on(test_task_list, body="Reordered"),
        user_id=other_user.id,
    )

    assert await WatcherService().watcher_ids(db_session, test_task_list) == [other_user.id]


@pytest.mark.asyncio
async def test_created_comment_serializes(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    """The returned comment is fully loaded and usable outside the session's greenlet."""
    result = await service.create_comment(
        db_session,
        on(
            test_conversation,
            body="Spec attached",
            uploads_attributes=[{"asset_file_name": "spec.pdf", "asset_file_size": 10}],
            linked_documents_attributes=[{"title": "Notes", "url": "https://example.com/notes"}],
        ),
        user_id=test_user.id,
    )

    response = CommentResponse.model_validate(result.comment)

    assert response.thread_id == f"Conversation_{test_conversation.id}"
    assert [u.asset_file_name for u in response.uploads] == ["spec.pdf"]
    assert [d.title for d in response.linked_documents] == ["Notes"]
    assert response.previous_assigned_id is None


@pytest.mark.asyncio
async def test_unknown_target_type(

    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
) -> None:
    with pytest.raises(UnknownTargetTypeError):
        await service.create_comment(
            db_session,
            CommentCreate(body="x", target_type="Invoice", target_id=str(uuid4())),
            user_id=test_user.id,
        )


@pytest.mark.asyncio
async def test_missing_target(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
) -> None:
    with pytest.raises(TargetNotFoundError):
        await service.create_comment(
            db_session,
            CommentCreate(body="x", target_type="Task", target_id=str(uuid4())),
            user_id=test_user.id,
        )


# =============================================================================
# Privacy
# =============================================================================


@pytest.mark.asyncio
async def test_owner_makes_task_private_with_watchers(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    other_user: User,
    third_user: User,
    test_task: Task,
) -> None:
    await WatcherService().add_watchers(db_session, test_task, [third_user.id])

    result = await service.create_comment(
        db_session,
        on(test_task, body="Hiding this one", is_private=True, private_ids=[test_user.id, other_user.id]),
        user_id=test_user.id,
    )

    assert result.comment.is_private is True
    assert test_task.is_private is True
    watchers = await WatcherService().watcher_ids(db_session, test_task)
    assert set(watchers) == {test_user.id, other_user.id}


@pytest.mark.asyncio
async def test_member_cannot_make_task_private(
    db_session: AsyncSession,
    service: CommentService,
    other_user: User,
    test_task: Task,
) -> None:
    result = await service.create_comment(
        db_session,
        on(test_task, body="Sneaky", is_private=True),
        user_id=other_user.id,
    )

    assert result.comment.is_private is False
    assert test_task.is_private is False


@pytest.mark.asyncio
async def test_comment_on_private_task_is_private(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    other_user: User,
    test_task: Task,
) -> None:
    test_task.is_private = True
    await db_session.commit()

    result = await service.create_comment(
        db_session,
        on(test_task, body="Seen by few"),
        user_id=other_user.id,
    )

    assert result.comment.is_private is True
    # The owner is added; the author of a private comment is not
    assert await WatcherService().watcher_ids(db_session, test_task) == [test_user.id]


# =============================================================================
# Validation
# =============================================================================


@pytest.mark.asyncio
async def test_body_required_on_conversation(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await service.create_comment(
            db_session,
            on(test_conversation, body="   "),
            user_id=test_user.id,
        )

    assert exc_info.value.has_error("body", "blank")
    assert await count_rows(db_session, Comment) == 0
    assert test_conversation.comments_count == 0


@pytest.mark.asyncio
async def test_task_comment_without_body(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    result = await service.create_comment(
        db_session,
        on(test_task, status=2),
        user_id=test_user.id,
    )

    assert result.comment.body is None
    assert result.comment.body_html is None
    assert result.comment.status == 2


@pytest.mark.asyncio
async def test_upload_replaces_body(
    db_session: AsyncSession,
    service: CommentService,
    other_user: User,
    test_conversation: Conversation,
) -> None:
    result = await service.create_comment(
        db_session,
        on(
            test_conversation,
            uploads_attributes=[{"asset_file_name": "plan.pdf", "asset_file_size": 2048}],
        ),
        user_id=other_user.id,
    )

    [upload] = result.comment.uploads
    assert upload.asset_file_name == "plan.pdf"
    assert upload.user_id == other_user.id
    assert upload.project_id == test_conversation.project_id


@pytest.mark.asyncio
async def test_blank_attachments_are_dropped(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await service.create_comment(
            db_session,
            on(
                test_conversation,
                uploads_attributes=[{"asset_file_name": ""}],
                linked_documents_attributes=[{"title": "No URL"}],
            ),
            user_id=test_user.id,
        )

    assert exc_info.value.has_error("body", "blank")


@pytest.mark.asyncio
async def test_existing_upload_attached_by_id(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    upload = Upload(asset_file_name="photo.jpg", asset_file_size=512, user_id=test_user.id)
    db_session.add(upload)
    await db_session.commit()

    result = await service.create_comment(
        db_session,
        on(test_conversation, upload_ids=[upload.id, str(uuid4())]),
        user_id=test_user.id,
    )

    assert [u.id for u in result.comment.uploads] == [upload.id]
    assert upload.comment_id == result.comment.id


@pytest.mark.asyncio
async def test_missing_author_and_body_reported_together(
    db_session: AsyncSession,
    service: CommentService,
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await service.create_comment(db_session, CommentCreate(body=""))

    assert exc_info.value.has_error("user", "blank")
    assert exc_info.value.has_error("body", "blank")


@pytest.mark.asyncio
async def test_deleted_author_still_valid(
    db_session: AsyncSession,
    service: CommentService,
    other_user: User,
    test_conversation: Conversation,
) -> None:
    other_user.soft_delete()
    await db_session.commit()

    result = await service.create_comment(
        db_session,
        on(test_conversation, body="Imported from the archive"),
        user_id=other_user.id,
    )

    assert result.comment.user_id == other_user.id


# =============================================================================
# Duplicates
# =============================================================================


@pytest.mark.asyncio
async def test_duplicate_comment_rejected(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    await service.create_comment(db_session, on(test_conversation, body="Ship it"), user_id=test_user.id)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_comment(
            db_session,
            on(test_conversation, body="  Ship it "),
            user_id=test_user.id,
        )

    assert exc_info.value.has_error("body", "duplicate")
    assert test_conversation.comments_count == 1


@pytest.mark.asyncio
async def test_duplicate_compares_attachments(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    def with_upload(size: int) -> CommentCreate:
        return on(
            test_conversation,
            body="Log file",
            uploads_attributes=[{"asset_file_name": "a.txt", "asset_file_size": size}],
        )

    await service.create_comment(db_session, with_upload(1), user_id=test_user.id)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_comment(db_session, with_upload(1), user_id=test_user.id)
    assert exc_info.value.has_error("body", "duplicate")

    result = await service.create_comment(db_session, with_upload(2), user_id=test_user.id)

    assert [u.asset_file_size for u in result.comment.uploads] == [2]
    assert test_conversation.comments_count == 2


@pytest.mark.asyncio
async def test_only_previous_comment_compared(

    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    for body in ("Ship it", "Wait", "Ship it"):
        await service.create_comment(db_session, on(test_conversation, body=body), user_id=test_user.id)

    assert test_conversation.comments_count == 3


@pytest.mark.asyncio
async def test_same_body_from_another_user_allowed(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    other_user: User,
    test_conversation: Conversation,
) -> None:
    await service.create_comment(db_session, on(test_conversation, body="+1"), user_id=test_user.id)
    await service.create_comment(db_session, on(test_conversation, body="+1"), user_id=other_user.id)

    assert test_conversation.comments_count == 2


@pytest.mark.asyncio
async def test_duplicate_with_hours_or_import_allowed(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    for _ in range(2):
        await service.create_comment(
            db_session,
            on(test_task, body="Daily work", human_hours="1h"),
            user_id=test_user.id,
        )
    for _ in range(2):
        await service.create_comment(
            db_session,
            on(test_task, body="Imported"),
            user_id=test_user.id,
            is_importing=True,
        )

    assert test_task.comments_count == 4


@pytest.mark.asyncio
async def test_duplicate_after_deleting_previous_allowed(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    first = await service.create_comment(
        db_session, on(test_conversation, body="Again"), user_id=test_user.id
    )
    await service.delete_comment(db_session, first.comment.id)

    result = await service.create_comment(
        db_session, on(test_conversation, body="Again"), user_id=test_user.id
    )

    assert result.comment.id != first.comment.id


# =============================================================================
# Best-effort side effects
# =============================================================================


@pytest.mark.asyncio
async def test_activity_failure_keeps_comment(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    service.activity_log.record = AsyncMock(side_effect=SQLAlchemyError("feed unavailable"))

    result = await service.create_comment(db_session, on(test_task, body="Still saved"), user_id=test_user.id)

    assert result.activity is None
    assert await count_rows(db_session, Comment) == 1
    assert await WatcherService().watcher_ids(db_session, test_task) == [test_user.id]


@pytest.mark.asyncio
async def test_fanout_failure_keeps_comment_and_activity(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    service.fanout.apply = AsyncMock(side_effect=SQLAlchemyError("lock timeout"))

    result = await service.create_comment(db_session, on(test_task, body="Still saved"), user_id=test_user.id)

    assert result.activity is not None
    assert await count_rows(db_session, Comment) == 1
    assert await count_rows(db_session, Activity) == 1


# =============================================================================
# Update
# =============================================================================


@pytest.mark.asyncio
async def test_update_comment(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    created = await service.create_comment(db_session, on(test_task, body="Draft"), user_id=test_user.id)
    service.fanout.apply = AsyncMock()

    comment = await service.update_comment(
        db_session,
        created.comment.id,
        CommentUpdate(body="*Final*", human_hours="45m"),
    )

    assert comment.body == "*Final*"
    assert "<em>Final</em>" in comment.body_html
    assert comment.hours == 0.75
    service.fanout.apply.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_keeps_unsubmitted_fields(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    created = await service.create_comment(
        db_session,
        on(test_task, body="Done", status=3, hours=2.0),
        user_id=test_user.id,
    )

    comment = await service.update_comment(db_session, created.comment.id, CommentUpdate(status=4))

    assert comment.body == "Done"
    assert comment.hours == 2.0
    assert comment.status == 4


@pytest.mark.asyncio
async def test_update_to_blank_body_rejected(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    created = await service.create_comment(db_session, on(test_conversation, body="Hi"), user_id=test_user.id)

    with pytest.raises(ValidationError) as exc_info:
        await service.update_comment(db_session, created.comment.id, CommentUpdate(body=""))

    assert exc_info.value.has_error("body", "blank")


@pytest.mark.asyncio
async def test_update_removes_and_adds_attachments(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    created = await service.create_comment(
        db_session,
        on(
            test_conversation,
            body="Files",
            uploads_attributes=[{"asset_file_name": "old.txt", "asset_file_size": 1}],
        ),
        user_id=test_user.id,
    )
    [old] = created.comment.uploads

    comment = await service.update_comment(
        db_session,
        created.comment.id,
        CommentUpdate(
            uploads_attributes=[
                {"id": old.id, "_destroy": True},
                {"asset_file_name": "new.txt", "asset_file_size": 2},
            ],
            linked_documents_attributes=[{"title": "Docs", "url": "https://example.com/docs"}],
        ),
    )

    assert [u.asset_file_name for u in comment.uploads] == ["new.txt"]
    assert [d.title for d in comment.linked_documents] == ["Docs"]
    assert await count_rows(db_session, Upload) == 1


@pytest.mark.asyncio
async def test_update_unknown_attachment(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    created = await service.create_comment(db_session, on(test_conversation, body="Hi"), user_id=test_user.id)

    with pytest.raises(NotFoundError):
        await service.update_comment(
            db_session,
            created.comment.id,
            CommentUpdate(uploads_attributes=[{"id": str(uuid4()), "_destroy": True}]),
        )


# =============================================================================
# Destruction
# =============================================================================


@pytest.mark.asyncio
async def test_delete_comment(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    created = await service.create_comment(db_session, on(test_task, body="Oops"), user_id=test_user.id)

    await service.delete_comment(db_session, created.comment.id)

    assert created.comment.is_deleted
    assert test_task.comments_count == 0
    assert not test_task.is_deleted
    assert await count_rows(db_session, Activity) == 0
    with pytest.raises(CommentNotFoundError):
        await service.get_comment(db_session, created.comment.id)


@pytest.mark.asyncio
async def test_delete_keeps_target_timestamp(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    created = await service.create_comment(db_session, on(test_task, body="Wrong task"), user_id=test_user.id)
    await db_session.refresh(test_task)
    touched_at = test_task.updated_at

    await service.delete_comment(db_session, created.comment.id)

    await db_session.refresh(test_task)
    assert test_task.comments_count == 0
    assert test_task.updated_at == touched_at


@pytest.mark.asyncio
async def test_deleting_last_comment_removes_simple_conversation(

    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    simple_conversation: Conversation,
) -> None:
    created = await service.create_comment(
        db_session, on(simple_conversation, body="Quick note"), user_id=test_user.id
    )

    await service.delete_comment(db_session, created.comment.id)

    assert simple_conversation.is_deleted


@pytest.mark.asyncio
async def test_simple_conversation_kept_while_comments_remain(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    other_user: User,
    simple_conversation: Conversation,
) -> None:
    first = await service.create_comment(
        db_session, on(simple_conversation, body="Quick note"), user_id=test_user.id
    )
    await service.create_comment(db_session, on(simple_conversation, body="Reply"), user_id=other_user.id)

    await service.delete_comment(db_session, first.comment.id)

    assert not simple_conversation.is_deleted
    assert simple_conversation.comments_count == 1


@pytest.mark.asyncio
async def test_regular_conversation_kept(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_conversation: Conversation,
) -> None:
    created = await service.create_comment(db_session, on(test_conversation, body="Only one"), user_id=test_user.id)

    await service.delete_comment(db_session, created.comment.id)

    assert not test_conversation.is_deleted


@pytest.mark.asyncio
async def test_delete_missing_comment(db_session: AsyncSession, service: CommentService) -> None:
    with pytest.raises(CommentNotFoundError):
        await service.delete_comment(db_session, str(uuid4()))


# =============================================================================
# Queries
# =============================================================================


@pytest.mark.asyncio
async def test_get_comment_resolves_people(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_person: Person,
    test_task: Task,
) -> None:
    created = await service.create_comment(
        db_session,
        on(test_task, body="Yours now", assigned_id=test_person.id),
        user_id=test_user.id,
    )

    resolved = await service.get_comment(db_session, created.comment.id)

    assert resolved.comment is created.comment
    assert resolved.user is test_user
    assert resolved.assigned is test_person
    assert resolved.previous_assigned is None


@pytest.mark.asyncio
async def test_list_comments_and_total_hours(
    db_session: AsyncSession,
    service: CommentService,
    test_user: User,
    test_task: Task,
) -> None:
    for body, hours in (("One", "1h"), ("Two", "30m"), ("Three", None)):
        data = on(test_task, body=body) if hours is None else on(test_task, body=body, human_hours=hours)
        await service.create_comment(db_session, data, user_id=test_user.id)

    comments, total = await service.list_comments(db_session, "Task", test_task.id, page=1, page_size=2)
    assert total == 3
    assert [c.body for c in comments] == ["One", "Two"]

    comments, _ = await service.list_comments(db_session, "Task", test_task.id, page=2, page_size=2)
    assert [c.body for c in comments] == ["Three"]

    assert await service.total_hours(db_session, "Task", test_task.id) == pytest.approx(1.5)
