"""
Solar panel repository - read access to the panel catalog.
"""

from sqlalchemy import select

from solarpanels.db.models.solar_panel import SolarPanel
from solarpanels.db.repositories.base_repository import BaseRepository


class PanelRepository(BaseRepository[SolarPanel]):
    def __init__(self, session):
        super().__init__(session, SolarPanel)

    async def get_active(self, id: int) -> SolarPanel | None:
        """Panel that can still be added to requests (not soft-deleted)."""
        result = await self.session.execute(
            select(SolarPanel).where(SolarPanel.id == id, SolarPanel.is_deleted.is_(False))
        )
        return result.scalar_one_or_none()
