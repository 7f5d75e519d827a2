from typing import Any, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from taskboard.models import Task, TaskPriority, TaskStatus, Timeline
from taskboard.repos.base import Repo

UPDATABLE_FIELDS = ("title", "description", "priority", "status", "assignee_id")


def _with_relations(stmt):
    # Reload rows already in the session so freshly written events show up
    return stmt.execution_options(populate_existing=True).options(
        selectinload(Task.assignee),
        selectinload(Task.timelines).selectinload(Timeline.actor),
    )


class TaskRepo(Repo):
    def create(
        self,
        title: str,
        project_id: str,
        assignee_id: str,
        description: Optional[str] = None,
        priority: TaskPriority = TaskPriority.LOW,
        status: TaskStatus = TaskStatus.TODO,
    ) -> Task:
        task = Task(
            title=title,
            description=description,
            project_id=project_id,
            assignee_id=assignee_id,
            priority=priority,
            status=status,
        )
        self.db.add(task)
        self.db.flush()
        return task

    def get(self, task_id: str) -> Optional[Task]:
        return self.db.scalars(_with_relations(select(Task).where(Task.id == task_id))).first()

    def exists(self, task_id: str) -> bool:
        return self.db.scalar(select(func.count()).select_from(Task).where(Task.id == task_id)) > 0

    def find_project_tasks(self, project_id: str) -> List[Task]:
        stmt = _with_relations(select(Task).where(Task.project_id == project_id)).order_by(Task.updated_at.desc())
        return list(self.db.scalars(stmt))

    def update(self, task: Task, **fields: Any) -> Task:
        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                raise ValueError(f"Task field '{name}' cannot be updated")
            setattr(task, name, value)
        self.db.flush()
        return task

    def update_status(self, task: Task, status: TaskStatus) -> Task:
        return self.update(task, status=status)

    def delete(self, task_id: str) -> int:
        result = self.db.execute(delete(Task).where(Task.id == task_id))
        return result.rowcount
