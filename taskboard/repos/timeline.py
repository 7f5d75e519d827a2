from typing import Iterable, List

from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from taskboard.models import TaskAction, Timeline
from taskboard.repos.base import Repo


class TimelineRepo(Repo):
    """Append-only task history. Rows are never updated."""

    def create(self, action: TaskAction, actor_id: str, task_id: str) -> Timeline:
        return self.create_many([action], actor_id=actor_id, task_id=task_id)[0]

    def create_many(self, actions: Iterable[TaskAction], actor_id: str, task_id: str) -> List[Timeline]:
        events = [Timeline(action=action, actor_id=actor_id, task_id=task_id) for action in actions]
        self.db.add_all(events)
        self.db.flush()
        return events

    def list_for_task(self, task_id: str) -> List[Timeline]:
        stmt = (
            select(Timeline)
            .options(selectinload(Timeline.actor))
            .where(Timeline.task_id == task_id)
            .order_by(Timeline.timestamp.desc())
        )
        return list(self.db.scalars(stmt))

    def count_for_task(self, task_id: str) -> int:
        return self.db.scalar(select(func.count()).select_from(Timeline).where(Timeline.task_id == task_id))

    def delete_for_task(self, task_id: str) -> int:
        result = self.db.execute(delete(Timeline).where(Timeline.task_id == task_id))
        return result.rowcount
