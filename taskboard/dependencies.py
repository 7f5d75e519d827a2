"""FastAPI dependencies"""
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from taskboard.application import Application
from taskboard.errors import UnauthorizedError
from taskboard.models import UserRole
from taskboard.services.auth import AuthPayload, AuthService
from taskboard.services.projects import ProjectService
from taskboard.services.realtime import RealtimeHub
from taskboard.services.tasks import TaskService

bearer_scheme = HTTPBearer(auto_error=False)


def get_application(connection: HTTPConnection) -> Application:
    return connection.app.state.application


def get_auth_service(application: Application = Depends(get_application)) -> AuthService:
    return application.auth_service


def get_project_service(application: Application = Depends(get_application)) -> ProjectService:
    return application.project_service


def get_task_service(application: Application = Depends(get_application)) -> TaskService:
    return application.task_service


def get_realtime(application: Application = Depends(get_application)) -> RealtimeHub:
    return application.realtime


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> AuthPayload:
    """Verify the bearer token and return the caller's identity"""
    if credentials is None:
        raise UnauthorizedError("Unauthorized. Please sign in.")
    return auth.verify_token(credentials.credentials)


def require_roles(*roles: UserRole) -> Callable[..., AuthPayload]:
    def dependency(current_user: AuthPayload = Depends(get_current_user)) -> AuthPayload:
        AuthService.authorize(current_user, roles)
        return current_user

    return dependency
