"""Task lifecycle engine.

Owns the task status state machine (TODO, IN_PROGRESS, DONE; any status may
move to any other) and guarantees that each change is written together with
its timeline events in one transaction. After every successful write the full
task list of the affected project is pushed to the project's realtime channel.

Database work runs in the threadpool so the event loop is only suspended at
I/O boundaries.
"""

import logging
from typing import Any, Dict, List

from starlette.concurrency import run_in_threadpool

from taskboard.database import DatabaseService
from taskboard.errors import AppError, NotFoundError
from taskboard.models import TaskAction, TaskPriority, TaskStatus
from taskboard.repos import TaskRepo, TimelineRepo
from taskboard.schemas import TaskCreate, TaskResponse, TaskUpdate
from taskboard.services.realtime import RealtimeHub
from taskboard.validators import (
    ensure_valid,
    validate_project_reference,
    validate_task_create,
    validate_task_id,
    validate_task_update,
)

logger = logging.getLogger(__name__)

STATUS_ACTIONS: Dict[TaskStatus, TaskAction] = {
    TaskStatus.TODO: TaskAction.MOVED_TO_TODO,
    TaskStatus.IN_PROGRESS: TaskAction.MOVED_TO_IN_PROGRESS,
    TaskStatus.DONE: TaskAction.MOVED_TO_DONE,
}


def status_action(status: TaskStatus) -> TaskAction:
    return STATUS_ACTIONS[TaskStatus(status)]


def _task_not_found(task_id: str) -> NotFoundError:
    return NotFoundError(f"Task {task_id} not found")


class TaskService:
    def __init__(self, database: DatabaseService, realtime: RealtimeHub):
        self.database = database
        self.realtime = realtime

    # Reads

    async def get_task(self, task_id: str) -> TaskResponse:
        return await run_in_threadpool(self._get_task, task_id)

    async def list_project_tasks(self, project_id: str) -> List[TaskResponse]:
        return await run_in_threadpool(self._list_project_tasks, project_id)

    def _get_task(self, task_id: str) -> TaskResponse:
        ensure_valid(validate_task_id(task_id))
        with self.database.session() as db:
            task = TaskRepo(db).get(task_id)
            if task is None:
                raise _task_not_found(task_id)
            return TaskResponse.model_validate(task)

    def _list_project_tasks(self, project_id: str) -> List[TaskResponse]:
        with self.database.session() as db:
            ensure_valid(validate_project_reference(db, project_id), "Tasks not found!")
            return [TaskResponse.model_validate(task) for task in TaskRepo(db).find_project_tasks(project_id)]

    # Writes

    async def create_task(self, data: TaskCreate, actor_id: str) -> TaskResponse:
        task = await run_in_threadpool(self._create_task, data, actor_id)
        await self._publish_after_write(task.project_id)
        return task

    async def update_task(self, task_id: str, data: TaskUpdate, actor_id: str) -> TaskResponse:
        task = await run_in_threadpool(self._update_task, task_id, data, actor_id)
        await self._publish_after_write(task.project_id)
        return task

    async def update_task_status(self, task_id: str, status: TaskStatus, actor_id: str) -> TaskResponse:
        task = await run_in_threadpool(self._update_task_status, task_id, status, actor_id)
        await self._publish_after_write(task.project_id)
        return task

    async def delete_task(self, task_id: str, actor_id: str) -> None:
        project_id = await run_in_threadpool(self._delete_task, task_id, actor_id)
        await self._publish_after_write(project_id)

    def _create_task(self, data: TaskCreate, actor_id: str) -> TaskResponse:
        with self.database.transaction() as db:
            ensure_valid(validate_task_create(db, data.project_id, data.assignee_id), "Task not created!")

            task = TaskRepo(db).create(
                title=data.title,
                description=data.description,
                project_id=data.project_id,
                assignee_id=data.assignee_id,
                priority=data.priority or TaskPriority.LOW,
                # Whatever the client sent, a new task starts in TODO
                status=TaskStatus.TODO,
            )
            TimelineRepo(db).create_many(
                [TaskAction.CREATED, status_action(TaskStatus.TODO)],
                actor_id=actor_id,
                task_id=task.id,
            )
            response = TaskResponse.model_validate(TaskRepo(db).get(task.id))

        logger.info("Task %s created in project %s by %s", response.id, response.project_id, actor_id)
        return response

    def _update_task(self, task_id: str, data: TaskUpdate, actor_id: str) -> TaskResponse:
        ensure_valid(validate_task_id(task_id))
        with self.database.transaction() as db:
            tasks = TaskRepo(db)
            task = tasks.get(task_id)
            if task is None:
                raise _task_not_found(task_id)
            ensure_valid(validate_task_update(db, data.assignee_id), "Task not updated!")

            previous_status = task.status
            previous_assignee = task.assignee_id

            fields: Dict[str, Any] = {"title": data.title, "assignee_id": data.assignee_id}
            for name in ("description", "priority", "status"):
                value = getattr(data, name)
                if value is not None:
                    fields[name] = value
            tasks.update(task, **fields)

            actions = [TaskAction.UPDATED]
            if task.assignee_id != previous_assignee:
                actions.append(TaskAction.ASSIGNED)
            if task.status != previous_status:
                actions.append(status_action(task.status))
            TimelineRepo(db).create_many(actions, actor_id=actor_id, task_id=task.id)

            response = TaskResponse.model_validate(tasks.get(task.id))

        logger.info("Task %s updated by %s (%s)", task_id, actor_id, ", ".join(a.value for a in actions))
        return response

    def _update_task_status(self, task_id: str, status: TaskStatus, actor_id: str) -> TaskResponse:
        ensure_valid(validate_task_id(task_id))
        status = TaskStatus(status)
        with self.database.transaction() as db:
            tasks = TaskRepo(db)
            task = tasks.get(task_id)
            if task is None:
                raise _task_not_found(task_id)

            tasks.update_status(task, status)
            TimelineRepo(db).create(status_action(status), actor_id=actor_id, task_id=task.id)
            response = TaskResponse.model_validate(tasks.get(task.id))

        logger.info("Task %s moved to %s by %s", task_id, status.value, actor_id)
        return response

    def _delete_task(self, task_id: str, actor_id: str) -> str:
        ensure_valid(validate_task_id(task_id))
        with self.database.session() as db:
            task = TaskRepo(db).get(task_id)
            if task is None:
                raise _task_not_found(task_id)
            project_id = task.project_id

        def delete_timelines(db):
            return TimelineRepo(db).delete_for_task(task_id)

        def delete_task_row(db):
            if TaskRepo(db).delete(task_id) == 0:
                # Deleted concurrently; roll back the timeline cleanup as well
                raise _task_not_found(task_id)

        self.database.execute_atomic([delete_timelines, delete_task_row])
        logger.info("Task %s deleted by %s", task_id, actor_id)
        return project_id

    # Fan-out

    async def publish_project_tasks(self, project_id: str) -> int:
        tasks = await self.list_project_tasks(project_id)
        return await self.realtime.broadcast(
            RealtimeHub.project_channel(project_id),
            {"event": "tasks", "projectId": project_id, "tasks": [task.to_json() for task in tasks]},
        )

    async def _publish_after_write(self, project_id: str) -> None:
        # The write is committed at this point; a failed push must not undo it
        try:
            await self.publish_project_tasks(project_id)
        except AppError as exc:
            logger.error("Failed to publish tasks for project %s: %s", project_id, exc.message)
