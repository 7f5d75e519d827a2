"""Project endpoints"""
from fastapi import APIRouter, Depends, status

from taskboard.api.responses import success
from taskboard.dependencies import get_current_user, get_project_service, require_roles
from taskboard.models import UserRole
from taskboard.schemas import ProjectCreate
from taskboard.services.auth import AuthPayload
from taskboard.services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    current_user: AuthPayload = Depends(require_roles(UserRole.ADMIN)),
    projects: ProjectService = Depends(get_project_service),
):
    project = projects.create_project(payload)
    return success("Project created.", project, status_code=status.HTTP_201_CREATED)


@router.get("")
def list_projects(
    current_user: AuthPayload = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    return success("All projects.", projects.list_projects())
