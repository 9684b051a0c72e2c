from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging
import re
import uuid

from ..models.task import Task
from ..models.media_item import MediaItem
from ..models.enums import TaskStatus, MediaType
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers
from .errors import (
    ServiceError,
    TaskNotFoundError,
    MediaNotFoundError,
    PermissionDeniedError,
    InvalidStatusError,
    InvalidAssigneeError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from .membership_service import MembershipService
from .media_storage import MediaStorage, MediaStorageError, remove_stored_media

logger = logging.getLogger(__name__)

VALID_STATUSES = tuple(s.value for s in TaskStatus)


class TaskService:
    def __init__(
        self,
        db: Session,
        membership_service: Optional[MembershipService] = None,
        storage: Optional[MediaStorage] = None,
        complete_on_upload_request: bool = False,
        upload_url_expires: int = AppConstants.MEDIA_UPLOAD_URL_EXPIRES_SECONDS,
    ):
        self.db = db
        self.membership = membership_service or MembershipService(db)
        self.storage = storage
        self.complete_on_upload_request = complete_on_upload_request
        self.upload_url_expires = upload_url_expires

    def create_task(
        self,
        unit_id: int,
        creator_id: int,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        assignee_id: Optional[int] = None,
    ) -> Task:
        """Create a pending task in the unit"""

        self.membership.require_active_member(
            creator_id, unit_id, "User is not a member of this unit"
        )
        if assignee_id is not None:
            self._validate_assignee(assignee_id, unit_id)

        try:
            task = Task(
                title=title,
                description=description,
                due_date=DateHelpers.to_naive_utc(due_date),
                status=TaskStatus.PENDING.value,
                creator_id=creator_id,
                assignee_id=assignee_id,
                unit_id=unit_id,
            )
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
            return task

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to create task: {str(e)}")

    def list_unit_tasks(
        self,
        unit_id: int,
        user_id: int,
        status: Optional[str] = None,
        assignee_id: Optional[int] = None,
    ) -> List[Task]:
        """Tasks of a unit, most recent first"""

        self.membership.require_active_member(
            user_id, unit_id, "User is not a member of this unit"
        )

        query = (
            self.db.query(Task)
            .options(
                joinedload(Task.creator),
                joinedload(Task.assignee),
                joinedload(Task.media_items),
            )
            .filter(Task.unit_id == unit_id)
        )
        if status is not None:
            self._validate_status(status)
            query = query.filter(Task.status == status)
        if assignee_id is not None:
            query = query.filter(Task.assignee_id == assignee_id)

        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    def get_task(self, task_id: int, user_id: int) -> Task:
        task = self._get_task_or_raise(task_id)
        self.membership.require_active_member(
            user_id, task.unit_id, "User is not authorized to view this task"
        )
        return task

    def update_status(self, task_id: int, requester_id: int, new_status: str) -> Task:
        """Move a task between pending, inProgress and completed"""

        self._validate_status(new_status)
        task = self._get_task_or_raise(task_id)
        membership = self.membership.require_active_member(
            requester_id, task.unit_id, "User is not authorized to update this task"
        )

        if (
            new_status == TaskStatus.COMPLETED.value
            and task.assignee_id != requester_id
            and not membership.is_admin
        ):
            raise PermissionDeniedError(
                "Only the assigned user or admin can mark a task as completed"
            )

        try:
            self._set_status(task, new_status)
            self.db.commit()
            self.db.refresh(task)
            return task

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to update task status: {str(e)}")

    def assign_task(self, task_id: int, requester_id: int, assignee_id: int) -> Task:
        """Reassign a task; reassignment invalidates a prior completion"""

        task = self._get_task_or_raise(task_id)
        self._require_creator_or_admin(
            requester_id, task, "Only the task creator or admin can assign tasks"
        )
        self._validate_assignee(assignee_id, task.unit_id)

        try:
            task.assignee_id = assignee_id
            if task.status == TaskStatus.COMPLETED.value:
                self._set_status(task, TaskStatus.IN_PROGRESS.value)

            self.db.commit()
            self.db.refresh(task)
            return task

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to assign task: {str(e)}")

    def request_media_upload_url(
        self, task_id: int, requester_id: int, filename: str, content_type: str
    ) -> Dict[str, Any]:
        """
        Issue a presigned upload URL for completion evidence.

        A MediaItem row is created straight away with size 0. The task is only
        completed once the upload is confirmed, unless the service runs with
        ``complete_on_upload_request`` enabled.

        Returns:
            dict with ``upload_url``, ``media_id`` and ``file_url``
        """
        if not filename or not content_type:
            raise ValidationError("Filename and content type are required")
        if content_type not in AppConstants.ALLOWED_MEDIA_TYPES:
            raise UnsupportedMediaTypeError(f"File type not allowed: {content_type}")

        task = self._get_task_or_raise(task_id)
        self._require_assignee(
            requester_id, task, "Only the assigned user can upload completion media"
        )
        if self.storage is None:
            raise MediaStorageError("Media storage is not configured")

        storage_key = f"tasks/{task.id}/{uuid.uuid4()}-{self._safe_filename(filename)}"
        presigned = self.storage.create_upload_url(
            storage_key, content_type, self.upload_url_expires
        )

        try:
            media_item = MediaItem(
                url=presigned.file_url,
                storage_key=storage_key,
                type=self._media_type_for(content_type),
                filename=filename,
                mime_type=content_type,
                size=0,
                uploaded=False,
                task_id=task.id,
            )
            self.db.add(media_item)

            if self.complete_on_upload_request:
                self._set_status(task, TaskStatus.COMPLETED.value)

            self.db.commit()
            self.db.refresh(media_item)

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to record media item: {str(e)}")

        return {
            "upload_url": presigned.upload_url,
            "media_id": media_item.id,
            "file_url": media_item.url,
            "expires_in": presigned.expires_in,
        }

    def confirm_media_upload(
        self, task_id: int, media_id: int, requester_id: int, size: int
    ) -> Task:
        """Record a finished upload and complete the task"""

        task = self._get_task_or_raise(task_id)
        self._require_assignee(
            requester_id, task, "Only the assigned user can confirm completion media"
        )

        media_item = (
            self.db.query(MediaItem)
            .filter(and_(MediaItem.id == media_id, MediaItem.task_id == task_id))
            .first()
        )
        if not media_item:
            raise MediaNotFoundError("Media item not found")

        try:
            media_item.size = size
            media_item.uploaded = True
            self._set_status(task, TaskStatus.COMPLETED.value)
            self.db.commit()
            self.db.refresh(task)
            logger.info(f"Task {task_id} completed with media {media_id}")
            return task

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to confirm upload: {str(e)}")

    def delete_task(self, task_id: int, requester_id: int) -> bool:
        """Delete a task, its media rows and (best effort) the stored objects"""

        task = self._get_task_or_raise(task_id)
        self._require_creator_or_admin(
            requester_id, task, "Only the task creator or admin can delete tasks"
        )

        storage_keys = [item.storage_key for item in task.media_items]

        try:
            # media rows go first through the delete-orphan cascade
            self.db.delete(task)
            self.db.commit()

        except Exception as e:
            self.db.rollback()
            raise ServiceError(f"Failed to delete task: {str(e)}")

        logger.info(f"Task {task_id} deleted by user {requester_id}")
        remove_stored_media(self.storage, storage_keys)
        return True

    # === PRIVATE HELPER METHODS ===

    def _get_task_or_raise(self, task_id: int) -> Task:
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task

    def _validate_status(self, status: str):
        if status not in VALID_STATUSES:
            raise InvalidStatusError(
                f"Invalid status value: {status}. Must be one of: {list(VALID_STATUSES)}"
            )

    def _validate_assignee(self, assignee_id: int, unit_id: int):
        if not self.membership.is_member(assignee_id, unit_id):
            raise InvalidAssigneeError("Assignee is not a member of this unit")

    def _require_creator_or_admin(self, user_id: int, task: Task, message: str):
        membership = self.membership.get_active_membership(user_id, task.unit_id)
        if not membership or (task.creator_id != user_id and not membership.is_admin):
            raise PermissionDeniedError(message)

    def _require_assignee(self, user_id: int, task: Task, message: str):
        if task.assignee_id is None or task.assignee_id != user_id:
            raise PermissionDeniedError(message)
        if not self.membership.is_member(user_id, task.unit_id):
            raise PermissionDeniedError(message)

    def _set_status(self, task: Task, new_status: str):
        task.status = new_status
        if new_status == TaskStatus.COMPLETED.value:
            task.completed_at = task.completed_at or DateHelpers.utc_now()
        else:
            task.completed_at = None

    @staticmethod
    def _media_type_for(content_type: str) -> str:
        if content_type.startswith("image/"):
            return MediaType.IMAGE.value
        return MediaType.VIDEO.value

    @staticmethod
    def _safe_filename(filename: str) -> str:
        name = filename.replace("\\", "/").split("/")[-1]
        return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "upload"

