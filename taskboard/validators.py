"""Input validators that need the database.

Shape and type checks live on the pydantic schemas. The functions here cover
what a schema cannot know: whether the referenced rows exist. Each returns a
``{field: message}`` map; an empty map means the input is valid.
"""
import uuid
from typing import Dict, Optional

from sqlalchemy.orm import Session

from taskboard.errors import ValidationError
from taskboard.repos import ProjectRepo, UserRepo

FieldErrors = Dict[str, str]


def is_uuid(value: Optional[str]) -> bool:
    try:
        return uuid.UUID(str(value)).version == 4
    except (TypeError, ValueError, AttributeError):
        return False


def _check_project(db: Session, project_id: str, errors: FieldErrors) -> None:
    if not is_uuid(project_id):
        errors["projectId"] = "Project ID is invalid"
    elif not ProjectRepo(db).exists(project_id):
        errors["projectId"] = "Project doesn't exist"


def _check_assignee(db: Session, assignee_id: str, errors: FieldErrors) -> None:
    if not is_uuid(assignee_id):
        errors["assigneeId"] = "Assignee ID is invalid"
    elif not UserRepo(db).exists(assignee_id):
        errors["assigneeId"] = "Assignee doesn't exist"


def validate_task_create(db: Session, project_id: str, assignee_id: str) -> FieldErrors:
    errors: FieldErrors = {}
    _check_project(db, project_id, errors)
    _check_assignee(db, assignee_id, errors)
    return errors


def validate_task_update(db: Session, assignee_id: str) -> FieldErrors:
    errors: FieldErrors = {}
    _check_assignee(db, assignee_id, errors)
    return errors


def validate_project_reference(db: Session, project_id: str) -> FieldErrors:
    errors: FieldErrors = {}
    _check_project(db, project_id, errors)
    return errors


def validate_task_id(task_id: str) -> FieldErrors:
    # Existence is reported as 404 by the caller, not as a field error
    if not is_uuid(task_id):
        return {"id": "Invalid ID"}
    return {}


def ensure_valid(errors: FieldErrors, message: str = "Validation failed") -> None:
    if errors:
        raise ValidationError(message, errors)
