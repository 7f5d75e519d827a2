import pytest
from fastapi.testclient import TestClient

from taskboard.application import Application
from taskboard.config import Settings
from taskboard.database import DatabaseService
from taskboard.main import create_app
from taskboard.models import UserRole
from taskboard.services import AuthService, ProjectService, RealtimeHub, TaskService
from tests.factories import create_project, create_user


@pytest.fixture
def config() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        ENVIRONMENT="test",
        JWT_SECRET_KEY="test-secret",
        CORS_ORIGINS="",
        SEED_ON_STARTUP=False,
    )


@pytest.fixture
def database(config: Settings):
    service = DatabaseService(config.DATABASE_URL)
    service.initialize()
    try:
        yield service
    finally:
        service.destroy()


@pytest.fixture
def hub() -> RealtimeHub:
    hub = RealtimeHub()
    hub.initialize()
    return hub


@pytest.fixture
def auth_service(database: DatabaseService, config: Settings) -> AuthService:
    return AuthService(database, config)


@pytest.fixture
def project_service(database: DatabaseService) -> ProjectService:
    return ProjectService(database)


@pytest.fixture
def task_service(database: DatabaseService, hub: RealtimeHub) -> TaskService:
    return TaskService(database, hub)


@pytest.fixture
def admin(database: DatabaseService):
    return create_user(database, "admin@example.com", role=UserRole.ADMIN, first_name="Jack")


@pytest.fixture
def member(database: DatabaseService):
    return create_user(database, "jane.doe@example.com")


@pytest.fixture
def project(database: DatabaseService):
    return create_project(database)


# HTTP


@pytest.fixture
def application(config: Settings) -> Application:
    return Application(config)


@pytest.fixture
def client(application: Application):
    with TestClient(create_app(application)) as test_client:
        yield test_client


@pytest.fixture
def app_admin(client: TestClient, application: Application):
    return create_user(application.database, "admin@example.com", role=UserRole.ADMIN, first_name="Jack")


@pytest.fixture
def app_member(client: TestClient, application: Application):
    return create_user(application.database, "jane.doe@example.com")


@pytest.fixture
def app_project(client: TestClient, application: Application):
    return create_project(application.database)
