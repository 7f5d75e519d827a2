import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, List, Optional, Sequence

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.errors import PersistenceError

logger = logging.getLogger(__name__)

# Default to a local SQLite database if no DATABASE_URL is provided
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(BASE_DIR, ".."))
DEFAULT_DB_PATH = os.path.join(PROJECT_ROOT, "taskboard.db")

# Base class for the models
Base = declarative_base()

Operation = Callable[[Session], Any]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create the SQLAlchemy engine, preferring the configured DATABASE_URL."""
    url = database_url or f"sqlite:///{DEFAULT_DB_PATH}"

    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection keeps the in-memory database alive
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):  # pragma: no cover - SQLAlchemy callback
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


class DatabaseService:
    """Owns the engine and hands out sessions and transactions."""

    def __init__(self, database_url: Optional[str] = None, create_tables: bool = True):
        self.database_url = database_url
        self.create_tables = create_tables
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def initialize(self) -> None:
        if self.engine is not None:
            logger.warning("Database already connected")
            return

        engine = build_engine(self.database_url)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))

        if self.create_tables:
            import taskboard.models  # noqa: F401  registers the tables on Base.metadata

            Base.metadata.create_all(bind=engine)

        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        logger.info("Database connected (%s)", engine.url.render_as_string(hide_password=True))

    def destroy(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self._session_factory = None
            logger.info("Database disconnected")

    def health_check(self) -> bool:
        if self.engine is None:
            logger.error("Database not connected")
            return False
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.error("Database health check failed: %s", exc)
            return False

    def _new_session(self) -> Session:
        if self._session_factory is None:
            raise PersistenceError("Database service not initialized")
        return self._session_factory()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Read-only unit of work; nothing is committed."""
        db = self._new_session()
        try:
            yield db
        except SQLAlchemyError as exc:
            raise PersistenceError.from_exception(exc) from exc
        finally:
            db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """All-or-nothing unit of work: commit on success, roll back on any error."""
        db = self._new_session()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError.from_exception(exc) from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def execute_atomic(self, operations: Sequence[Operation]) -> List[Any]:
        """Run write operations in order inside a single transaction."""
        with self.transaction() as db:
            results = []
            for operation in operations:
                results.append(operation(db))
                db.flush()
            return results
