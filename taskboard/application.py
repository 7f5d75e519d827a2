"""Application wiring and lifecycle.

``Application`` owns the service registry. It registers every service with
its dependencies, starts them inside the FastAPI lifespan and stops them in
reverse order when the server shuts down.
"""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from taskboard.config import Settings, settings
from taskboard.database import DatabaseService, utcnow
from taskboard.registry import ServiceRegistry
from taskboard.seed import SEED_ENVIRONMENTS, DatabaseSeeder
from taskboard.services.auth import AuthService
from taskboard.services.projects import ProjectService
from taskboard.services.realtime import RealtimeHub
from taskboard.services.tasks import TaskService

logger = logging.getLogger(__name__)


def _log_connection(subscriber: Any) -> None:
    client = getattr(subscriber, "client", None)
    logger.info("Realtime client connected: %s", client or subscriber)


def build_registry(config: Settings) -> ServiceRegistry:
    registry = ServiceRegistry()
    registry.singleton("config", lambda: config)
    registry.singleton(
        "database",
        lambda config: DatabaseService(config.DATABASE_URL),
        dependencies=["config"],
    )
    registry.singleton(
        "realtime",
        RealtimeHub,
        initializer=lambda hub: hub.on_client_connected(_log_connection),
    )
    registry.singleton("auth_service", AuthService, dependencies=["database", "config"])
    registry.singleton("project_service", ProjectService, dependencies=["database"])
    registry.singleton("task_service", TaskService, dependencies=["database", "realtime"])
    registry.transient("seeder", DatabaseSeeder, dependencies=["database"])
    return registry


class Application:
    def __init__(self, config: Settings = settings, registry: Optional[ServiceRegistry] = None):
        self.config = config
        self.registry = registry if registry is not None else build_registry(config)
        self.started_at: Optional[float] = None
        self._shutdown: Optional[asyncio.Future] = None

    # Lifecycle

    async def start(self) -> None:
        logger.info("Starting %s (%s)", self.config.APP_NAME, self.config.ENVIRONMENT)
        self._shutdown = None
        await self.registry.start()
        self.started_at = time.monotonic()

        if self.config.SEED_ON_STARTUP and self.config.ENVIRONMENT in SEED_ENVIRONMENTS:
            seeder = self.registry.resolve("seeder")
            await run_in_threadpool(seeder.run, self.config.ENVIRONMENT)

    async def stop(self) -> None:
        """Stop all services; concurrent callers wait on the same shutdown."""
        if self._shutdown is None:
            self._shutdown = asyncio.ensure_future(self._stop())
        await asyncio.shield(self._shutdown)

    async def _stop(self) -> None:
        logger.info("Shutting down %s...", self.config.APP_NAME)
        await self.registry.stop(timeout=self.config.SHUTDOWN_TIMEOUT_SECONDS)
        self.started_at = None

    @asynccontextmanager
    async def lifespan(self, app):
        await self.start()
        try:
            yield
        finally:
            await self.stop()

    # Health

    async def health_status(self) -> Dict[str, Any]:
        services = await self.registry.health_check()
        healthy = bool(services) and all(services.values())
        uptime = time.monotonic() - self.started_at if self.started_at is not None else 0.0
        return {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": utcnow().isoformat(),
            "uptime": round(uptime, 3),
            "environment": self.config.ENVIRONMENT,
            "services": services,
        }

    # Services

    @property
    def database(self) -> DatabaseService:
        return self.registry.resolve("database")

    @property
    def realtime(self) -> RealtimeHub:
        return self.registry.resolve("realtime")

    @property
    def auth_service(self) -> AuthService:
        return self.registry.resolve("auth_service")

    @property
    def project_service(self) -> ProjectService:
        return self.registry.resolve("project_service")

    @property
    def task_service(self) -> TaskService:
        return self.registry.resolve("task_service")
