from fastapi import APIRouter, Depends, Query, status
from typing import Dict, Any, Optional
from ..models.user import User
from ..services.task_service import TaskService
from ..schemas.task import (
    TaskCreate,
    TaskStatusUpdate,
    TaskAssign,
    TaskResponse,
    TaskDetail,
    MediaUploadRequest,
    MediaUploadConfirm,
    MediaUploadResponse,
)
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_task_service
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["tasks"])


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_task(
    task_data: TaskCreate,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task = task_service.create_task(
        unit_id=task_data.unit_id,
        creator_id=current_user.id,
        title=task_data.title,
        description=task_data.description,
        due_date=task_data.due_date,
        assignee_id=task_data.assignee_id,
    )
    return RouterResponse.created(
        data=TaskResponse.model_validate(task), message="Task created successfully"
    )


@router.get("/unit/{unit_id}", response_model=Dict[str, Any])
@handle_service_errors
async def list_unit_tasks(
    unit_id: int,
    status_filter: Optional[str] = Query(None, alias="status"),
    assignee_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """All tasks of a unit, most recent first"""
    tasks = task_service.list_unit_tasks(
        unit_id, current_user.id, status=status_filter, assignee_id=assignee_id
    )
    return RouterResponse.success(data=[TaskDetail.model_validate(t) for t in tasks])


@router.get("/{task_id}", response_model=Dict[str, Any])
@handle_service_errors
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task = task_service.get_task(task_id, current_user.id)
    return RouterResponse.success(data=TaskDetail.model_validate(task))


@router.patch("/{task_id}/status", response_model=Dict[str, Any])
@handle_service_errors
async def update_task_status(
    task_id: int,
    status_data: TaskStatusUpdate,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task = task_service.update_status(task_id, current_user.id, status_data.status)
    return RouterResponse.updated(
        data=TaskResponse.model_validate(task), message="Task status updated"
    )


@router.patch("/{task_id}/assign", response_model=Dict[str, Any])
@handle_service_errors
async def assign_task(
    task_id: int,
    assignment: TaskAssign,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task = task_service.assign_task(task_id, current_user.id, assignment.assignee_id)
    return RouterResponse.updated(
        data=TaskResponse.model_validate(task), message="Task assigned"
    )


@router.post("/{task_id}/media-upload-url", response_model=Dict[str, Any])
@handle_service_errors
async def request_media_upload_url(
    task_id: int,
    upload_request: MediaUploadRequest,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Presigned URL for uploading completion evidence (assignee only)"""
    result = task_service.request_media_upload_url(
        task_id=task_id,
        requester_id=current_user.id,
        filename=upload_request.filename,
        content_type=upload_request.content_type,
    )
    return RouterResponse.success(data=MediaUploadResponse(**result))


@router.post("/{task_id}/media/{media_id}/confirm", response_model=Dict[str, Any])
@handle_service_errors
async def confirm_media_upload(
    task_id: int,
    media_id: int,
    confirmation: MediaUploadConfirm,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Confirm an upload finished; completes the task"""
    task = task_service.confirm_media_upload(
        task_id=task_id,
        media_id=media_id,
        requester_id=current_user.id,
        size=confirmation.size,
    )
    return RouterResponse.updated(
        data=TaskDetail.model_validate(task), message="Task completed"
    )


@router.delete("/{task_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task_service.delete_task(task_id, current_user.id)
    return RouterResponse.deleted(message="Task deleted successfully")
