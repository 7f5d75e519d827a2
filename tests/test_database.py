import pytest
from sqlalchemy import select

from taskboard.database import DatabaseService
from taskboard.errors import PersistenceError
from taskboard.models import User, UserRole
from taskboard.repos import UserRepo


def test_health_check_follows_connection(config):
    database = DatabaseService(config.DATABASE_URL)
    assert database.health_check() is False

    database.initialize()
    assert database.health_check() is True

    database.destroy()
    assert database.health_check() is False


def test_transaction_rolls_back_on_error(database):
    with pytest.raises(RuntimeError):
        with database.transaction() as db:
            UserRepo(db).create(first_name="Jane", last_name="Doe", email="jane@example.com")
            raise RuntimeError("abort")

    with database.session() as db:
        assert UserRepo(db).count() == 0


def test_unique_violation_becomes_persistence_error(database, admin):
    with pytest.raises(PersistenceError) as exc:
        with database.transaction() as db:
            UserRepo(db).create(first_name="Other", last_name="Admin", email=admin.email, role=UserRole.ADMIN)

    assert exc.value.message.startswith("Constraint failed")


def test_execute_atomic_all_or_nothing(database):
    def first(db):
        return UserRepo(db).create(first_name="A", last_name="One", email="a@example.com")

    def second(db):
        return UserRepo(db).create(first_name="B", last_name="Two", email="a@example.com")

    with pytest.raises(PersistenceError):
        database.execute_atomic([first, second])

    with database.session() as db:
        assert db.scalars(select(User)).all() == []

    results = database.execute_atomic([first])
    assert results[0].email == "a@example.com"


def test_uninitialized_service_refuses_sessions():
    with pytest.raises(PersistenceError):
        with DatabaseService("sqlite://").session():
            pass
