"""Schemas for users and authentication"""
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from taskboard.models import UserRole
from taskboard.schemas.base import CamelModel


class SignUpRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    # Accepted for compatibility; sign-up always creates a USER
    role: Optional[UserRole] = None

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class SignInRequest(CamelModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class UserSummary(CamelModel):
    id: str
    first_name: str
    last_name: str


class UserResponse(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: EmailStr
    role: UserRole
    created_at: datetime


class AuthResponse(CamelModel):
    user: UserResponse
    token: str
