from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from taskboard.models import Project, Task
from taskboard.repos.base import Repo


class ProjectRepo(Repo):
    def create(self, title: str, description: str) -> Project:
        project = Project(title=title, description=description)
        self.db.add(project)
        self.db.flush()
        return project

    def get(self, project_id: str) -> Optional[Project]:
        return self.db.get(Project, project_id)

    def exists(self, project_id: str) -> bool:
        return self.db.scalar(select(func.count()).select_from(Project).where(Project.id == project_id)) > 0

    def list_all(self) -> List[Project]:
        stmt = (
            select(Project)
            .options(selectinload(Project.tasks).selectinload(Task.assignee))
            .order_by(Project.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Project))
