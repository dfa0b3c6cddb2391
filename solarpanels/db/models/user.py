"""
User model - identity with a login, password hash and a role flag.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from solarpanels.core.roles import Role
from solarpanels.db.base import Base


class User(Base):
    """User entity. Role is fixed at creation; users are never hard-deleted."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_moderator: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    @property
    def role(self) -> Role:
        return Role.MODERATOR if self.is_moderator else Role.USER

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login={self.login})>"
