"""
Panel endpoints - putting catalog panels into the caller's draft.
"""

from fastapi import APIRouter, status

from solarpanels.api.v1.endpoints.solarpanel_requests import get_request_service
from solarpanels.core.dependencies import CurrentPrincipal
from solarpanels.db.session import DbSession
from solarpanels.schemas.solar_request import PanelAddedResponse

router = APIRouter()


@router.post("/{panel_id}", response_model=PanelAddedResponse, status_code=status.HTTP_201_CREATED)
async def add_panel_to_request(session: DbSession, principal: CurrentPrincipal, panel_id: int):
    """Add a panel to the caller's draft; the draft is created on first use. 409 if already there."""
    return await get_request_service(session).add_panel(principal, panel_id)
