"""
Pydantic schemas for request/response validation
"""
from taskboard.schemas.user import AuthResponse, SignInRequest, SignUpRequest, UserResponse, UserSummary
from taskboard.schemas.project import ProjectCreate, ProjectResponse
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from taskboard.schemas.timeline import TimelineResponse

__all__ = [
    "AuthResponse",
    "SignInRequest",
    "SignUpRequest",
    "UserResponse",
    "UserSummary",
    "ProjectCreate",
    "ProjectResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskStatusUpdate",
    "TaskUpdate",
    "TimelineResponse",
]
