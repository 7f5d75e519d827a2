"""
Timeline Model

Append-only history of what happened to a task.
"""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, String
from sqlalchemy.orm import relationship

from taskboard.database import Base, utcnow


class TaskAction(str, enum.Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    ASSIGNED = "ASSIGNED"
    MOVED_TO_TODO = "MOVED_TO_TODO"
    MOVED_TO_IN_PROGRESS = "MOVED_TO_IN_PROGRESS"
    MOVED_TO_DONE = "MOVED_TO_DONE"


class Timeline(Base):
    __tablename__ = "timelines"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    action = Column(SQLEnum(TaskAction), nullable=False)
    actor_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    actor = relationship("User", back_populates="timelines")
    task = relationship("Task", back_populates="timelines")
