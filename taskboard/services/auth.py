"""Sign-up, sign-in and bearer tokens."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Tuple

import jwt
from sqlalchemy import exc as sa_exc

from taskboard.config import Settings
from taskboard.database import DatabaseService
from taskboard.errors import ConflictError, ForbiddenError, NotFoundError, PersistenceError, UnauthorizedError
from taskboard.models import UserRole
from taskboard.repos import UserRepo
from taskboard.schemas import SignInRequest, SignUpRequest, UserResponse

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with email already exists."


@dataclass(frozen=True)
class AuthPayload:
    subject_id: str
    role: UserRole


class AuthService:
    def __init__(self, database: DatabaseService, config: Settings):
        self.database = database
        self.config = config

    def sign_up(self, data: SignUpRequest) -> Tuple[UserResponse, str]:
        try:
            with self.database.transaction() as db:
                users = UserRepo(db)
                if users.find_by_email(data.email) is not None:
                    raise ConflictError(DUPLICATE_EMAIL)

                user = users.create(
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email,
                    role=UserRole.USER,
                )
                response = UserResponse.model_validate(user)
        except PersistenceError as exc:
            # A concurrent sign-up took the email between the check and the insert
            if isinstance(exc.__cause__, sa_exc.IntegrityError):
                raise ConflictError(DUPLICATE_EMAIL) from exc
            raise

        logger.info("User %s signed up", response.id)
        return response, self.issue_token(response.id, response.role)

    def sign_in(self, data: SignInRequest) -> Tuple[UserResponse, str]:
        with self.database.session() as db:
            user = UserRepo(db).find_by_email(data.email)
            if user is None:
                raise NotFoundError("User not found")
            response = UserResponse.model_validate(user)

        return response, self.issue_token(response.id, response.role)

    def list_users(self):
        with self.database.session() as db:
            return [UserResponse.model_validate(user) for user in UserRepo(db).list_all()]

    def issue_token(self, user_id: str, role: UserRole) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + timedelta(minutes=self.config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        }
        return jwt.encode(payload, self.config.JWT_SECRET_KEY, algorithm=self.config.JWT_ALGORITHM)

    def verify_token(self, token: str) -> AuthPayload:
        if not token:
            raise UnauthorizedError("Unauthorized. Please sign in.")
        try:
            claims = jwt.decode(token, self.config.JWT_SECRET_KEY, algorithms=[self.config.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("Unauthorized. Token expired!") from exc
        except jwt.InvalidTokenError as exc:
            raise UnauthorizedError("Unauthorized. Invalid token!") from exc

        try:
            return AuthPayload(subject_id=str(claims["sub"]), role=UserRole(claims["role"]))
        except (KeyError, ValueError) as exc:
            raise UnauthorizedError("Unauthorized. Invalid token!") from exc

    @staticmethod
    def authorize(payload: AuthPayload, roles: Iterable[UserRole]) -> None:
        if payload.role not in tuple(roles):
            raise ForbiddenError("Access Denied.")
