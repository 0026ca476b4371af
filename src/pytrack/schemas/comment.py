"""Comment schemas for request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pytrack.core.config import settings
from pytrack.core.duration import parse_duration


class UploadAttributes(BaseModel):
    """Nested upload entry submitted with a comment."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Existing upload ID")
    asset_file_name: Optional[str] = Field(default=None, max_length=255)
    asset_file_size: Optional[int] = Field(default=None, ge=0)
    asset_content_type: Optional[str] = Field(default=None, max_length=100)
    destroy: bool = Field(default=False, alias="_destroy", description="Remove this upload")

    @property
    def is_blank(self) -> bool:
        return not (self.asset_file_name or "").strip()


class LinkedDocumentAttributes(BaseModel):
    """Nested linked document entry submitted with a comment."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Existing linked document ID")
    title: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = Field(default=None, max_length=2048)
    destroy: bool = Field(default=False, alias="_destroy", description="Remove this link")

    @property
    def is_blank(self) -> bool:
        return not (self.title or "").strip() or not (self.url or "").strip()


class CommentBase(BaseModel):
    """Fields shared by comment creation and update."""

    body: Optional[str] = Field(
        default=None,
        max_length=settings.comment_body_max_length,
        description="Comment text (Markdown)",
    )
    status: Optional[int] = Field(default=None, description="Target status set by this comment")
    assigned_id: Optional[str] = Field(default=None, description="Person made responsible")
    hours: Optional[float] = Field(default=None, ge=0, description="Time spent, in hours")
    human_hours: Optional[str] = Field(
        default=None,
        description="Time spent as typed by the user, e.g. '2h 30m' or '2:30'",
    )
    upload_ids: list[str] = Field(default_factory=list)
    uploads_attributes: list[UploadAttributes] = Field(default_factory=list)
    linked_documents_attributes: list[LinkedDocumentAttributes] = Field(default_factory=list)

    @model_validator(mode="after")
    def convert_human_hours(self) -> "CommentBase":
        """``human_hours`` wins over ``hours`` when it was submitted."""
        if "human_hours" in self.model_fields_set:
            hours = parse_duration(self.human_hours)
            if hours is not None and hours < 0:
                raise ValueError("human_hours must not be negative")
            self.hours = hours
        return self


class CommentCreate(CommentBase):
    """Schema for creating a comment."""

    target_type: Optional[str] = Field(default=None, description="Type of the commented object")
    target_id: Optional[str] = Field(default=None, description="ID of the commented object")
    project_id: Optional[str] = Field(default=None, description="Owning project")
    billable: bool = False
    is_private: bool = False
    private_ids: Optional[list[str]] = Field(
        default=None,
        description="Users who may see the target once it becomes private",
    )

    @property
    def is_private_set(self) -> bool:
        """Whether the submitter explicitly chose a privacy setting."""
        return "is_private" in self.model_fields_set


class CommentUpdate(CommentBase):
    """Schema for updating a comment."""

    billable: Optional[bool] = None


class UploadResponse(BaseModel):
    """Schema for upload response."""

    id: str
    asset_file_name: str
    asset_file_size: Optional[int]
    asset_content_type: Optional[str]

    model_config = {"from_attributes": True}


class LinkedDocumentResponse(BaseModel):
    """Schema for linked document response."""

    id: str
    title: str
    url: str

    model_config = {"from_attributes": True}


class CommentResponse(BaseModel):
    """Schema for comment response."""

    id: str
    target_type: Optional[str]
    target_id: Optional[str]
    thread_id: str
    user_id: str
    project_id: Optional[str]
    assigned_id: Optional[str]
    previous_assigned_id: Optional[str]
    body: Optional[str]
    body_html: Optional[str]
    hours: Optional[float]
    human_hours: Optional[float]
    status: Optional[int]
    billable: bool
    is_private: bool
    uploads: list[UploadResponse]
    linked_documents: list[LinkedDocumentResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentListResponse(BaseModel):
    """Schema for comment list response."""

    items: list[CommentResponse]
    total: int
    page: int
    page_size: int
