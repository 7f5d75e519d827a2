"""Application error taxonomy.

Every error raised by the services carries an HTTP-style status code so the
outermost layer can translate it without knowing where it came from.
"""

from typing import Any, Dict, Optional

from sqlalchemy import exc as sa_exc


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, error: Any = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 422
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None):
        self.errors = dict(errors or {})
        super().__init__(message, error=self.errors)


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class PersistenceError(AppError):
    status_code = 500
    default_message = "An unexpected database error occurred."

    # Ordered most specific first; the first isinstance match wins.
    _CAUSES = (
        (sa_exc.IntegrityError, "Constraint failed: the change violates a unique, foreign key or not-null constraint."),
        (sa_exc.DataError, "Invalid database value: a provided value is not valid for the column type."),
        (sa_exc.TimeoutError, "Connection pool timeout: timed out waiting for a database connection."),
        (sa_exc.OperationalError, "Cannot reach database server, or the operation failed at the database."),
        (sa_exc.ProgrammingError, "Schema error: a table or column is missing. A migration is likely needed."),
        (sa_exc.NoResultFound, "Record not found: the query returned no rows."),
        (sa_exc.InvalidRequestError, "Invalid database request."),
    )

    @classmethod
    def from_exception(cls, error: BaseException) -> "PersistenceError":
        """Classify a SQLAlchemy error into a stable, readable cause."""
        detail = str(getattr(error, "orig", None) or error).strip().splitlines()
        last_line = detail[-1] if detail else ""
        for error_type, cause in cls._CAUSES:
            if isinstance(error, error_type):
                return cls(f"{cause} {last_line}".strip())
        return cls(f"{cls.default_message} {last_line}".strip())
