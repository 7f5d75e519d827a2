"""Task endpoints"""
from fastapi import APIRouter, Depends, Query, status

from taskboard.api.responses import success
from taskboard.dependencies import get_current_user, get_task_service, require_roles
from taskboard.models import UserRole
from taskboard.schemas import TaskCreate, TaskStatusUpdate, TaskUpdate
from taskboard.services.auth import AuthPayload
from taskboard.services.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    current_user: AuthPayload = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    task = await tasks.create_task(payload, actor_id=current_user.subject_id)
    return success("Task created.", task, status_code=status.HTTP_201_CREATED)


@router.get("")
async def list_project_tasks(
    project_id: str = Query(..., alias="projectId"),
    current_user: AuthPayload = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    return success("All tasks.", await tasks.list_project_tasks(project_id))


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    current_user: AuthPayload = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    return success("Task found.", await tasks.get_task(task_id))


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    current_user: AuthPayload = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    task = await tasks.update_task(task_id, payload, actor_id=current_user.subject_id)
    return success("Task updated.", task)


@router.patch("/{task_id}/status")
async def update_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    current_user: AuthPayload = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    task = await tasks.update_task_status(task_id, payload.status, actor_id=current_user.subject_id)
    return success("Task status updated.", task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: AuthPayload = Depends(require_roles(UserRole.ADMIN)),
    tasks: TaskService = Depends(get_task_service),
):
    await tasks.delete_task(task_id, actor_id=current_user.subject_id)
    return success("Task deleted.")
