from sqlalchemy.orm import Session


class Repo:
    """Data access bound to one unit of work; the caller owns commit/rollback."""

    def __init__(self, db: Session):
        self.db = db
