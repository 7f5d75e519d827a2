"""Taskboard database models"""
from taskboard.models.user import User, UserRole
from taskboard.models.project import Project
from taskboard.models.task import Task, TaskPriority, TaskStatus
from taskboard.models.timeline import Timeline, TaskAction

__all__ = [
    "User",
    "UserRole",
    "Project",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Timeline",
    "TaskAction",
]
