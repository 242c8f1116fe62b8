"""
User repository.
"""

from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_reservations.models.user import User
from campus_reservations.repositories.base.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Read access to campus users."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def find_by_ids(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = {user_id for user_id in user_ids if user_id}
        if not ids:
            return {}
        users = self.db.scalars(select(User).where(User.id.in_(ids))).all()
        return {user.id: user for user in users}

    def display_name(self, user_id: str) -> str:
        """Name for messages; falls back to the id for unknown or system actors."""
        user = self.find_by_id(user_id)
        return user.name if user else user_id
