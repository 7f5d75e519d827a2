from typing import List, Optional

from sqlalchemy import func, select

from taskboard.models import User, UserRole
from taskboard.repos.base import Repo


class UserRepo(Repo):
    def create(self, first_name: str, last_name: str, email: str, role: UserRole = UserRole.USER) -> User:
        user = User(first_name=first_name, last_name=last_name, email=email, role=role)
        self.db.add(user)
        self.db.flush()
        return user

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def exists(self, user_id: str) -> bool:
        return self.db.scalar(select(func.count()).select_from(User).where(User.id == user_id)) > 0

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).first()

    def list_all(self) -> List[User]:
        return list(self.db.scalars(select(User).order_by(User.created_at.asc())))

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(User))
