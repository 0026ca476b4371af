"""
Nested attachment assignment for comments.

Entries are applied while the comment is being built. Blank entries are
dropped here, silently, and never reach validation:

- an upload without a file name,
- a linked document without a title or without a URL.

An entry carrying ``id`` and ``_destroy`` removes that attachment from the
comment; an entry carrying only ``id`` updates it in place.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pytrack.core.exceptions import NotFoundError
from pytrack.models.comment import Comment
from pytrack.models.linked_document import LinkedDocument
from pytrack.models.upload import Upload
from pytrack.schemas.comment import LinkedDocumentAttributes, UploadAttributes


def _by_id(items: list, item_id: str):
    for item in items:
        if str(item.id) == str(item_id):
            return item
    return None


def assign_uploads(comment: Comment, entries: list[UploadAttributes]) -> None:
    """Apply nested upload entries to ``comment.uploads``.

    Raises:
        NotFoundError: If an entry references an upload not on this comment
    """
    for entry in entries:
        if entry.id:
            upload = _by_id(comment.uploads, entry.id)
            if upload is None:
                raise NotFoundError("Upload", entry.id)
            if entry.destroy:
                comment.uploads.remove(upload)
            elif not entry.is_blank:
                upload.asset_file_name = entry.asset_file_name
                if entry.asset_file_size is not None:
                    upload.asset_file_size = entry.asset_file_size
                if entry.asset_content_type is not None:
                    upload.asset_content_type = entry.asset_content_type
            continue

        if entry.destroy or entry.is_blank:
            continue

        comment.uploads.append(
            Upload(
                asset_file_name=entry.asset_file_name,
                asset_file_size=entry.asset_file_size,
                asset_content_type=entry.asset_content_type,
                user_id=comment.user_id,
                project_id=comment.project_id,
            )
        )


def assign_linked_documents(comment: Comment, entries: list[LinkedDocumentAttributes]) -> None:
    """Apply nested linked document entries to ``comment.linked_documents``.

    Raises:
        NotFoundError: If an entry references a link not on this comment
    """
    for entry in entries:
        if entry.id:
            document = _by_id(comment.linked_documents, entry.id)
            if document is None:
                raise NotFoundError("LinkedDocument", entry.id)
            if entry.destroy:
                comment.linked_documents.remove(document)
            elif not entry.is_blank:
                document.title = entry.title
                document.url = entry.url
            continue

        if entry.destroy or entry.is_blank:
            continue

        comment.linked_documents.append(
            LinkedDocument(
                title=entry.title,
                url=entry.url,
                user_id=comment.user_id,
                project_id=comment.project_id,
            )
        )


async def find_uploads(
    db: AsyncSession,
    upload_ids: list[str],
    exclude: Optional[list[Upload]] = None,
) -> list[Upload]:
    """Existing uploads to attach by ID. Unknown IDs are ignored."""
    if not upload_ids:
        return []
    result = await db.execute(select(Upload).where(Upload.id.in_(upload_ids)))
    skip = {str(upload.id) for upload in exclude or []}
    return [upload for upload in result.scalars().all() if str(upload.id) not in skip]


def claim_attachments(comment: Comment) -> None:
    """Give attachments built before ownership was known the comment's user and project."""
    for item in [*comment.uploads, *comment.linked_documents]:
        item.user_id = item.user_id or comment.user_id
        item.project_id = item.project_id or comment.project_id
