"""HTTP and WebSocket routers"""
from taskboard.api.v1 import auth, projects, realtime, tasks, users

__all__ = ["auth", "projects", "realtime", "tasks", "users"]
