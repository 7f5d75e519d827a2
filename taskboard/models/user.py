"""
User Model
"""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SQLEnum, String
from sqlalchemy.orm import relationship

from taskboard.database import Base, utcnow


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    tasks = relationship("Task", back_populates="assignee")
    timelines = relationship("Timeline", back_populates="actor")
