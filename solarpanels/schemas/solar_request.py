"""Solar panel request schemas - REST API contract for the request lifecycle."""

from pydantic import BaseModel

from solarpanels.db.models.solar_panel_request import RequestStatus

# Dates in responses and filter query parameters
DATE_FORMAT = "%d-%m-%Y %H:%M:%S"


class RequestPanelResponse(BaseModel):
    id: int
    title: str
    type: str
    power: int
    width: int
    height: int
    image: str | None = None
    is_deleted: bool = False
    area: float


class SolarPanelRequestListItem(BaseModel):
    id: int
    status: RequestStatus
    creator: str
    moderator: str | None = None
    created_at: str | None = None
    formed_at: str | None = None
    moderated_at: str | None = None
    total_power: float | None = None  # None until the calculation result arrives
    insolation: float


class SolarPanelRequestResponse(SolarPanelRequestListItem):
    solarpanels: list[RequestPanelResponse] = []


class CartSummary(BaseModel):
    request_id: int = 0
    panels_in_request: int = 0


class PanelAddedResponse(BaseModel):
    request_id: int
    panel_id: int


class InsolationUpdate(BaseModel):
    insolation: float


class AreaUpdate(BaseModel):
    area: float


class ModeratorAction(BaseModel):
    action: str  # "completed" or "rejected"


class TotalPowerUpdate(BaseModel):
    token: str
    total_power: float


class MessageResponse(BaseModel):
    message: str
