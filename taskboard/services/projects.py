import logging
from typing import List

from taskboard.database import DatabaseService
from taskboard.repos import ProjectRepo
from taskboard.schemas import ProjectCreate, ProjectResponse

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, database: DatabaseService):
        self.database = database

    def create_project(self, data: ProjectCreate) -> ProjectResponse:
        with self.database.transaction() as db:
            project = ProjectRepo(db).create(title=data.title, description=data.description)
            response = ProjectResponse.model_validate(project)
        logger.info("Project %s created", response.id)
        return response

    def list_projects(self) -> List[ProjectResponse]:
        with self.database.session() as db:
            return [ProjectResponse.model_validate(project) for project in ProjectRepo(db).list_all()]
