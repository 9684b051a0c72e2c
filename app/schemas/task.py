from pydantic import BaseModel, computed_field, Field
from typing import List, Optional
from datetime import datetime
from app.models.enums import TaskStatus
from ..utils.date_helpers import DateHelpers
from .user import UserSummary


class TaskCreate(BaseModel):
    unit_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[datetime] = None
    assignee_id: Optional[int] = None


class TaskStatusUpdate(BaseModel):
    status: str = Field(..., description="pending, inProgress or completed")


class TaskAssign(BaseModel):
    assignee_id: int = Field(..., gt=0)


class MediaUploadRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1)


class MediaUploadConfirm(BaseModel):
    size: int = Field(..., ge=0, description="Uploaded size in bytes")


class MediaUploadResponse(BaseModel):
    upload_url: str
    media_id: int
    file_url: str
    expires_in: int


class MediaItemResponse(BaseModel):
    id: int
    url: str
    type: str
    filename: str
    mime_type: str
    size: int
    uploaded: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    unit_id: int
    creator_id: Optional[int] = None
    assignee_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def is_overdue(self) -> bool:
        if not self.due_date or self.status == TaskStatus.COMPLETED.value:
            return False
        return DateHelpers.to_naive_utc(self.due_date) < DateHelpers.utc_now()

    class Config:
        from_attributes = True


class TaskDetail(TaskResponse):
    creator: Optional[UserSummary] = None
    assignee: Optional[UserSummary] = None
    media_items: List[MediaItemResponse] = []
