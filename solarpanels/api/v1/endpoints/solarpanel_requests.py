"""
Solar panel request endpoints - cart, lifecycle transitions and moderation.
Design: Thin controller; SolarPanelRequestService holds the rules.
"""

from fastapi import APIRouter, Query, status

from solarpanels.clients.calculation_client import CalculationClientDep
from solarpanels.core.dependencies import CurrentPrincipal, ModeratorPrincipal, OptionalPrincipal
from solarpanels.core.exceptions import Unauthenticated
from solarpanels.core.security import verify_service_token
from solarpanels.db.repositories import (
    PanelRepository,
    RequestPanelRepository,
    SolarPanelRequestRepository,
)
from solarpanels.db.session import DbSession
from solarpanels.schemas.solar_request import (
    AreaUpdate,
    CartSummary,
    InsolationUpdate,
    MessageResponse,
    ModeratorAction,
    SolarPanelRequestListItem,
    SolarPanelRequestResponse,
    TotalPowerUpdate,
)
from solarpanels.services.request_service import SolarPanelRequestService, parse_request_filter

router = APIRouter()


def get_request_service(session, calculation_client=None) -> SolarPanelRequestService:
    """Factory for service with repository injection."""
    return SolarPanelRequestService(
        SolarPanelRequestRepository(session),
        RequestPanelRepository(session),
        PanelRepository(session),
        calculation_client=calculation_client,
    )


@router.get("/info", response_model=CartSummary)
async def cart_summary(session: DbSession, principal: OptionalPrincipal):
    """Caller's draft id and item count; zeros when anonymous or no draft."""
    return await get_request_service(session).cart_summary(principal)


@router.get("", response_model=list[SolarPanelRequestListItem])
async def list_requests(
    session: DbSession,
    principal: CurrentPrincipal,
    status_filter: str | None = Query(None, alias="status"),
    start_date: str | None = Query(None, description="dd-mm-yyyy hh:mm:ss, bound on formed date"),
    end_date: str | None = Query(None, description="dd-mm-yyyy hh:mm:ss, bound on formed date"),
):
    """Submitted requests. Empty list when nothing matches."""
    request_filter = parse_request_filter(status_filter, start_date, end_date)
    return await get_request_service(session).list_requests(principal, request_filter)


@router.get("/{request_id}", response_model=SolarPanelRequestResponse)
async def get_request(session: DbSession, principal: CurrentPrincipal, request_id: int):
    return await get_request_service(session).get_request(principal, request_id)


@router.put("/{request_id}", response_model=SolarPanelRequestResponse)
async def set_insolation(
    session: DbSession, principal: CurrentPrincipal, request_id: int, data: InsolationUpdate
):
    """Set site insolation on a draft."""
    return await get_request_service(session).set_insolation(principal, request_id, data.insolation)


@router.put("/{request_id}/form", response_model=SolarPanelRequestResponse)
async def form_request(session: DbSession, principal: CurrentPrincipal, request_id: int):
    """Submit a draft for moderation."""
    return await get_request_service(session).form(principal, request_id)


@router.put("/{request_id}/moderate", response_model=SolarPanelRequestResponse)
async def moderate_request(
    session: DbSession,
    principal: ModeratorPrincipal,
    calculation_client: CalculationClientDep,
    request_id: int,
    data: ModeratorAction,
):
    """Complete or reject a formed request (moderators only)."""
    svc = get_request_service(session, calculation_client)
    return await svc.moderate(principal, request_id, data.action)


@router.put("/{request_id}/update-total-power", response_model=MessageResponse)
async def update_total_power(session: DbSession, request_id: int, data: TotalPowerUpdate):
    """Callback of the calculation service, authenticated by the shared service token."""
    if not verify_service_token(data.token):
        raise Unauthenticated("Invalid service token")
    await get_request_service(session).apply_calculation_result(request_id, data.total_power)
    return MessageResponse(message="Total power updated")


@router.delete("/{request_id}", response_model=MessageResponse)
async def delete_request(session: DbSession, principal: CurrentPrincipal, request_id: int):
    await get_request_service(session).delete(principal, request_id)
    return MessageResponse(message="Solar panel request deleted")


@router.put("/{request_id}/panels/{panel_id}", response_model=SolarPanelRequestResponse)
async def set_panel_area(
    session: DbSession,
    principal: CurrentPrincipal,
    request_id: int,
    panel_id: int,
    data: AreaUpdate,
):
    return await get_request_service(session).set_panel_area(
        principal, request_id, panel_id, data.area
    )


@router.delete(
    "/{request_id}/panels/{panel_id}",
    response_model=SolarPanelRequestResponse,
    status_code=status.HTTP_200_OK,
)
async def remove_panel(
    session: DbSession, principal: CurrentPrincipal, request_id: int, panel_id: int
):
    return await get_request_service(session).remove_panel(principal, request_id, panel_id)
