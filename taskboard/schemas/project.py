"""Schemas for projects"""
from datetime import datetime
from typing import List

from pydantic import Field

from taskboard.schemas.base import CamelModel
from taskboard.schemas.task import TaskResponse


class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)


class ProjectResponse(CamelModel):
    id: str
    title: str
    description: str
    created_at: datetime
    tasks: List[TaskResponse] = Field(default_factory=list)
