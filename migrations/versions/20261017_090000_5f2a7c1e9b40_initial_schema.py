"""Initial schema

Revision ID: 5f2a7c1e9b40
Revises:
Create Date: 2026-10-17 09:00:00.000000+00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = "5f2a7c1e9b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    ]


def _deleted_at() -> sa.Column:
    return sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True)


def _target_columns() -> list[sa.Column]:
    return [
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("comments_count", sa.Integer(), server_default="0", nullable=False),
    ]


def _is_private() -> sa.Column:
    return sa.Column("is_private", sa.Boolean(), server_default=sa.text("false"), nullable=False)


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "users",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("login", sa.String(40), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index("ix_users_login", "users", ["login"])

    op.create_table(
        "projects",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("permalink", sa.String(255), nullable=True, unique=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index("ix_projects_user_id", "projects", ["user_id"])

    op.create_table(
        "people",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index("ix_people_project_user", "people", ["project_id", "user_id"])

    # Comment targets
    op.create_table(
        "tasks",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("assigned_id", _uuid(), sa.ForeignKey("people.id", ondelete="SET NULL"), nullable=True),
        _is_private(),
        *_target_columns(),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_table(
        "conversations",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("simple", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _is_private(),
        *_target_columns(),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_table(
        "task_lists",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_target_columns(),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_table(
        "pages",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_target_columns(),
        *_timestamps(),
        _deleted_at(),
    )
    for table in ("tasks", "conversations", "task_lists", "pages"):
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_project_id", table, ["project_id"])

    op.create_table(
        "comments",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", _uuid(), nullable=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("assigned_id", _uuid(), sa.ForeignKey("people.id"), nullable=True),
        sa.Column("previous_assigned_id", _uuid(), sa.ForeignKey("people.id"), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("body_html", sa.Text(), nullable=True),
        sa.Column("hours", sa.Float(), nullable=True),
        sa.Column("status", sa.Integer(), nullable=True),
        sa.Column("billable", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        _is_private(),
        *_timestamps(),
        _deleted_at(),
    )
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    op.create_index("ix_comments_project_id", "comments", ["project_id"])
    op.create_index("ix_comments_target", "comments", ["target_type", "target_id"])
    op.create_index(
        "ix_comments_target_user_created",
        "comments",
        ["target_type", "target_id", "user_id", "created_at"],
    )

    op.create_table(
        "uploads",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("comment_id", _uuid(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("asset_file_name", sa.String(255), nullable=False),
        sa.Column("asset_file_size", sa.Integer(), nullable=True),
        sa.Column("asset_content_type", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_uploads_comment_id", "uploads", ["comment_id"])

    op.create_table(
        "linked_documents",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("comment_id", _uuid(), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_linked_documents_comment_id", "linked_documents", ["comment_id"])

    op.create_table(
        "activities",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("project_id", _uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=False),
        sa.Column("target_id", _uuid(), nullable=False),
        sa.Column("comment_target_type", sa.String(50), nullable=True),
        sa.Column("comment_target_id", _uuid(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_activities_project_id", "activities", ["project_id"])
    op.create_index("ix_activities_target", "activities", ["target_type", "target_id"])

    op.create_table(
        "watchers",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("target_type", sa.String(50), nullable=False),
        sa.Column("target_id", _uuid(), nullable=False),
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("target_type", "target_id", "user_id", name="uq_watchers_target_user"),
    )
    op.create_index("ix_watchers_target", "watchers", ["target_type", "target_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    for table in (
        "watchers",
        "activities",
        "linked_documents",
        "uploads",
        "comments",
        "pages",
        "task_lists",
        "conversations",
        "tasks",
        "people",
        "projects",
        "users",
    ):
        op.drop_table(table)
