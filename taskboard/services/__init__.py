"""
Application services
"""
from taskboard.services.auth import AuthPayload, AuthService
from taskboard.services.projects import ProjectService
from taskboard.services.realtime import RealtimeHub
from taskboard.services.tasks import TaskService

__all__ = ["AuthPayload", "AuthService", "ProjectService", "RealtimeHub", "TaskService"]
