from sqlalchemy import exc as sa_exc

from taskboard.errors import AppError, NotFoundError, PersistenceError, ValidationError


def test_error_defaults():
    assert NotFoundError().message == "Resource not found"
    assert NotFoundError().status_code == 404
    assert AppError("Teapot", status_code=418).status_code == 418


def test_validation_error_carries_field_map():
    error = ValidationError("Task not created!", {"projectId": "Project doesn't exist"})

    assert error.status_code == 422
    assert error.error == {"projectId": "Project doesn't exist"}
    assert error.errors == error.error


def test_persistence_error_classification():
    integrity = sa_exc.IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
    error = PersistenceError.from_exception(integrity)

    assert error.status_code == 500
    assert error.message.startswith("Constraint failed")
    assert error.message.endswith("UNIQUE constraint failed: users.email")

    operational = sa_exc.OperationalError("SELECT 1", {}, Exception("unable to open database file"))
    assert PersistenceError.from_exception(operational).message.startswith("Cannot reach database server")

    assert PersistenceError.from_exception(sa_exc.SQLAlchemyError("odd")).message == (
        "An unexpected database error occurred. odd"
    )
