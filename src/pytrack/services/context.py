"""Per-operation state for comment creation."""

from dataclasses import dataclass, field
from typing import Optional

from pytrack.schemas.comment import CommentCreate


@dataclass
class CommentContext:
    """
    Request-scoped flags for one comment operation.

    None of this is persisted or kept on the comment once the operation ends.

    Attributes:
        is_importing: Bulk import in progress; skips duplicate detection
        is_private_set: The submitter explicitly chose a privacy setting
        private_ids: Users to keep as watchers when the target turns private
        mentioned_user_ids: Users mentioned in the body, resolved by the caller
    """

    is_importing: bool = False
    is_private_set: bool = False
    private_ids: Optional[list[str]] = None
    mentioned_user_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_create(
        cls,
        data: CommentCreate,
        is_importing: bool = False,
        mentioned_user_ids: Optional[list[str]] = None,
    ) -> "CommentContext":
        return cls(
            is_importing=is_importing,
            is_private_set=data.is_private_set,
            private_ids=list(data.private_ids) if data.private_ids is not None else None,
            mentioned_user_ids=list(mentioned_user_ids or []),
        )
