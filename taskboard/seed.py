"""Development seed data.

    python -m taskboard.seed development
"""
import argparse
import logging
import sys
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from taskboard.config import settings
from taskboard.database import DatabaseService
from taskboard.logging_config import configure_logging
from taskboard.models import UserRole
from taskboard.repos import ProjectRepo, UserRepo

logger = logging.getLogger(__name__)

SEED_ENVIRONMENTS = ("development", "production")


class UserSeeder:
    seeds: Dict[str, List[dict]] = {
        "development": [
            {"first_name": "Jack", "last_name": "Doe", "email": "admin@example.com", "role": UserRole.ADMIN},
            {"first_name": "Jane", "last_name": "Doe", "email": "jane.doe@example.com", "role": UserRole.USER},
            {"first_name": "John", "last_name": "Doe", "email": "john.doe@example.com", "role": UserRole.USER},
        ],
        "production": [],
    }

    def seed(self, db: Session, environment: str) -> int:
        users = self.seeds.get(environment)
        if not users:
            return 0

        repo = UserRepo(db)
        if repo.count() > 0:
            logger.info("Users already seeded!")
            return 0

        for user in users:
            repo.create(**user)
        logger.info("Users seeded!")
        return len(users)


class ProjectSeeder:
    seeds: Dict[str, List[dict]] = {
        "development": [
            {"title": "Website redesign", "description": "Refresh the marketing site and landing pages."},
            {"title": "Mobile app", "description": "First release of the iOS and Android clients."},
            {"title": "Data migration", "description": "Move legacy records to the new storage."},
        ],
        "production": [],
    }

    def seed(self, db: Session, environment: str) -> int:
        projects = self.seeds.get(environment)
        if not projects:
            return 0

        repo = ProjectRepo(db)
        if repo.count() > 0:
            logger.info("Projects already seeded!")
            return 0

        for project in projects:
            repo.create(**project)
        logger.info("Projects seeded!")
        return len(projects)


SEEDERS = (UserSeeder, ProjectSeeder)


class DatabaseSeeder:
    def __init__(self, database: DatabaseService):
        self.database = database

    def run(self, environment: str) -> int:
        if environment not in SEED_ENVIRONMENTS:
            raise ValueError(f"Unknown seed environment: {environment}")

        logger.info("Seeding %s environment.", environment)
        created = 0
        with self.database.transaction() as db:
            for seeder in SEEDERS:
                created += seeder().seed(db, environment)
        logger.info("Database seeded successfully! (%d rows)", created)
        return created


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the taskboard database")
    parser.add_argument("environment", choices=SEED_ENVIRONMENTS)
    args = parser.parse_args(argv)

    configure_logging()
    if settings.ENVIRONMENT != args.environment:
        logger.warning("Seeding the wrong environment (%s). Check your environment!", settings.ENVIRONMENT)
        return 1

    database = DatabaseService(settings.DATABASE_URL)
    database.initialize()
    try:
        DatabaseSeeder(database).run(args.environment)
    finally:
        database.destroy()
    return 0


if __name__ == "__main__":
    sys.exit(main())
