"""
User repository - encapsulates user data access.
"""

from sqlalchemy import select

from solarpanels.db.models.user import User
from solarpanels.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """User-specific queries."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_login(self, login: str) -> User | None:
        """Find user by login - used for authentication and registration."""
        result = await self.session.execute(select(User).where(User.login == login))
        return result.scalar_one_or_none()
