"""Realtime board channel.

Clients talk to ``/ws`` with JSON frames ``{"event", "ack", "data"}``. Every
frame gets exactly one reply echoing its ``ack``::

    {"event": "tasks", "ack": 1, "status": "ok", "tasks": [...]}
    {"event": "tasks", "ack": 1, "status": "error", "error": "Unauthorized. Invalid token!"}

Besides replies, a subscribed client receives ``{"event": "tasks",
"projectId", "tasks"}`` pushes whenever a task of that project changes.
"""
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from taskboard.application import Application
from taskboard.dependencies import get_application
from taskboard.errors import AppError, ValidationError
from taskboard.models import TaskStatus
from taskboard.schemas import TaskResponse
from taskboard.services.realtime import RealtimeHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

EventHandler = Callable[[Application, WebSocket, Dict[str, Any]], Awaitable[List[TaskResponse]]]


async def _handle_tasks(application: Application, websocket: WebSocket, data: Dict[str, Any]) -> List[TaskResponse]:
    application.auth_service.verify_token(data.get("token"))
    project_id = data.get("projectId")
    if not isinstance(project_id, str):
        raise ValidationError("Tasks not found!", {"projectId": "Project ID is invalid"})

    tasks = await application.task_service.list_project_tasks(project_id)
    if not application.realtime.subscribe(RealtimeHub.project_channel(project_id), websocket):
        raise AppError("Too many clients are watching this project.", status_code=503)
    return tasks


async def _handle_status_update(
    application: Application, websocket: WebSocket, data: Dict[str, Any]
) -> List[TaskResponse]:
    payload = application.auth_service.verify_token(data.get("token"))
    task = data.get("task")
    if not isinstance(task, dict):
        raise ValidationError("Task not updated!", {"task": "Invalid task"})
    try:
        status = TaskStatus(task.get("status"))
    except (TypeError, ValueError) as exc:
        raise ValidationError("Task not updated!", {"status": "Invalid status"}) from exc

    updated = await application.task_service.update_task_status(task.get("id"), status, actor_id=payload.subject_id)
    return await application.task_service.list_project_tasks(updated.project_id)


EVENT_HANDLERS: Dict[str, EventHandler] = {
    "tasks": _handle_tasks,
    "task_status_update": _handle_status_update,
}


def _error_reply(event: Any, ack: Any, message: str) -> Dict[str, Any]:
    return {"event": event, "ack": ack, "status": "error", "error": message}


async def handle_frame(application: Application, websocket: WebSocket, frame: Any) -> Dict[str, Any]:
    if not isinstance(frame, dict):
        return _error_reply(None, None, "Malformed frame")

    event, ack = frame.get("event"), frame.get("ack")
    data = frame.get("data")
    handler = EVENT_HANDLERS.get(event)
    if handler is None:
        return _error_reply(event, ack, f"Unknown event: {event}")
    if not isinstance(data, dict):
        return _error_reply(event, ack, "Malformed frame")

    try:
        tasks = await handler(application, websocket, data)
    except AppError as exc:
        logger.info("Realtime %s failed: %s", event, exc.message)
        return _error_reply(event, ack, exc.message)
    return {"event": event, "ack": ack, "status": "ok", "tasks": [task.to_json() for task in tasks]}


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket, application: Application = Depends(get_application)):
    hub = application.realtime
    await websocket.accept()
    await hub.client_connected(websocket)

    try:
        while True:
            message = await websocket.receive_text()
            try:
                frame = json.loads(message)
            except ValueError:
                await websocket.send_json(_error_reply(None, None, "Malformed frame"))
                continue
            await websocket.send_json(await handle_frame(application, websocket, frame))
    except WebSocketDisconnect as exc:
        logger.info("Realtime client disconnected (code %s)", exc.code)
    finally:
        hub.disconnect(websocket)
