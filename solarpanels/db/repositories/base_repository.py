"""
Base repository - session handling and inserts shared by all repositories.
Consistent data access, testability via mocks, queries kept in one place.
"""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from solarpanels.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository. Subclasses define model-specific methods."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def add(self, entity: ModelType) -> ModelType:
        """Persist new entity. Caller commits session."""
        self.session.add(entity)
        await self.session.flush()  # Get ID without committing
        await self.session.refresh(entity)
        return entity

    async def commit(self) -> None:
        """Commit now, so the change is visible before the response is sent."""
        await self.session.commit()
