"""Repositories: one per entity, all sharing the caller's session."""
from taskboard.repos.user import UserRepo
from taskboard.repos.project import ProjectRepo
from taskboard.repos.task import TaskRepo
from taskboard.repos.timeline import TimelineRepo

__all__ = ["UserRepo", "ProjectRepo", "TaskRepo", "TimelineRepo"]
