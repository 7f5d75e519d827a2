"""Schemas for tasks"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from taskboard.models import TaskPriority, TaskStatus
from taskboard.schemas.base import CamelModel
from taskboard.schemas.timeline import TimelineResponse
from taskboard.schemas.user import UserSummary


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    project_id: str
    assignee_id: str
    priority: Optional[TaskPriority] = None
    # Ignored: new tasks always start in TODO
    status: Optional[TaskStatus] = None


class TaskUpdate(CamelModel):
    title: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    assignee_id: str
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    project_id: str
    assignee_id: str
    assignee: Optional[UserSummary] = None
    priority: TaskPriority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
    timelines: List[TimelineResponse] = Field(default_factory=list)
