"""
Request item repository - items of a draft request.
Mutations only touch rows whose parent request is still a draft.
"""

from sqlalchemy import delete, insert, select, update

from solarpanels.db.models.request_panel import RequestPanel
from solarpanels.db.models.solar_panel_request import RequestStatus, SolarPanelRequest
from solarpanels.db.repositories.base_repository import BaseRepository


def _draft_request(request_id: int):
    return select(SolarPanelRequest.id).where(
        SolarPanelRequest.id == request_id,
        SolarPanelRequest.status == RequestStatus.DRAFT,
    )


class RequestPanelRepository(BaseRepository[RequestPanel]):
    def __init__(self, session):
        super().__init__(session, RequestPanel)

    async def contains(self, request_id: int, panel_id: int) -> bool:
        result = await self.session.execute(
            select(RequestPanel.id).where(
                RequestPanel.request_id == request_id, RequestPanel.panel_id == panel_id
            )
        )
        return result.scalar_one_or_none() is not None

    async def insert(self, request_id: int, panel_id: int, area: float = 0.0) -> None:
        """Raises IntegrityError if the panel is already in the request."""
        await self.session.execute(
            insert(RequestPanel).values(request_id=request_id, panel_id=panel_id, area=area)
        )

    async def remove(self, request_id: int, panel_id: int) -> bool:
        result = await self.session.execute(
            delete(RequestPanel)
            .where(
                RequestPanel.request_id.in_(_draft_request(request_id)),
                RequestPanel.panel_id == panel_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_area(self, request_id: int, panel_id: int, area: float) -> bool:
        result = await self.session.execute(
            update(RequestPanel)
            .where(
                RequestPanel.request_id.in_(_draft_request(request_id)),
                RequestPanel.panel_id == panel_id,
            )
            .values(area=area)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
