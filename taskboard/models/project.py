"""
Project Model
"""
import uuid

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from taskboard.database import Base, utcnow


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    tasks = relationship("Task", back_populates="project", order_by="Task.updated_at.desc()")
