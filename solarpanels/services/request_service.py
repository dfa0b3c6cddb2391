"""
Solar panel request service - the request lifecycle.

    draft -> formed -> completed | rejected
    draft -> deleted

completed, rejected and deleted are terminal. Only a draft accepts item and
insolation changes; only a formed request can be moderated.

Checks run in a fixed order so callers always see the same error for the
same situation: request lookup (NotFound), ownership (Forbidden), current
status (Conflict), then content (BadRequest). Status writes are conditional
updates; when one matches zero rows the request moved underneath us and the
caller gets Conflict (or NotFound if the row is gone). A successful write
is committed before the view is built, so a response never runs ahead of
the database.
"""

import logging
import math
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from solarpanels.clients.calculation_client import CalculationClient
from solarpanels.core.dependencies import Principal
from solarpanels.core.exceptions import (
    BadRequest,
    CalculationServiceError,
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    ServiceError,
)
from solarpanels.db.models.solar_panel_request import RequestStatus, SolarPanelRequest
from solarpanels.db.repositories.panel_repository import PanelRepository
from solarpanels.db.repositories.request_panel_repository import RequestPanelRepository
from solarpanels.db.repositories.request_repository import RequestFilter, SolarPanelRequestRepository
from solarpanels.observability.metrics import record_transition
from solarpanels.schemas.solar_request import (
    DATE_FORMAT,
    CartSummary,
    PanelAddedResponse,
    RequestPanelResponse,
    SolarPanelRequestListItem,
    SolarPanelRequestResponse,
)
from solarpanels.services.power import calculate_total_power, contributions_from_items

logger = logging.getLogger(__name__)

MAX_INSOLATION = 10.0

MODERATOR_ACTIONS = {
    "completed": RequestStatus.COMPLETED,
    "rejected": RequestStatus.REJECTED,
}

REQUEST_NOT_FOUND = "Solar panel request not found"
NOT_YOUR_REQUEST = "Solar panel request is not available to this user"


def format_date(value: datetime | None) -> str | None:
    return value.strftime(DATE_FORMAT) if value else None


def parse_filter_date(value: str | None, name: str) -> datetime | None:
    """Parse a `dd-mm-yyyy hh:mm:ss` query value as UTC. Empty means no bound."""
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise BadRequest(f"Invalid {name}, expected format dd-mm-yyyy hh:mm:ss")


def parse_request_filter(
    status: str | None, start_date: str | None, end_date: str | None
) -> RequestFilter:
    parsed_status = None
    if status:
        try:
            parsed_status = RequestStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in RequestStatus)
            raise BadRequest(f"Invalid status, expected one of: {allowed}")
    return RequestFilter(
        status=parsed_status,
        start_date=parse_filter_date(start_date, "start_date"),
        end_date=parse_filter_date(end_date, "end_date"),
    )


def is_valid_area(area: float) -> bool:
    return math.isfinite(area) and area > 0


def is_valid_insolation(insolation: float) -> bool:
    return math.isfinite(insolation) and 0 < insolation <= MAX_INSOLATION


def validate_for_forming(areas, insolation: float) -> None:
    """Every item needs a positive finite area and the insolation must be in (0, 10]."""
    if not all(is_valid_area(area) for area in areas):
        raise BadRequest("Every panel in the request needs a positive area")
    if not is_valid_insolation(insolation):
        raise BadRequest("Insolation must be greater than 0 and at most 10")


def _to_list_item(request: SolarPanelRequest) -> SolarPanelRequestListItem:
    return SolarPanelRequestListItem(
        id=request.id,
        status=request.status,
        creator=request.creator.login,
        moderator=request.moderator.login if request.moderator else None,
        created_at=format_date(request.created_at),
        formed_at=format_date(request.formed_at),
        moderated_at=format_date(request.moderated_at),
        total_power=request.total_power,
        insolation=request.insolation,
    )


def _to_response(request: SolarPanelRequest) -> SolarPanelRequestResponse:
    """Full view with items. Soft-deleted panels stay listed, flagged."""
    panels = [
        RequestPanelResponse(
            id=item.panel.id,
            title=item.panel.title,
            type=item.panel.type,
            power=item.panel.power,
            width=item.panel.width,
            height=item.panel.height,
            image=item.panel.image,
            is_deleted=item.panel.is_deleted,
            area=item.area,
        )
        for item in request.items
    ]
    return SolarPanelRequestResponse(
        **_to_list_item(request).model_dump(),
        solarpanels=panels,
    )


class SolarPanelRequestService:
    """All request use cases. Endpoints stay thin; this class owns the rules."""

    def __init__(
        self,
        request_repo: SolarPanelRequestRepository,
        item_repo: RequestPanelRepository,
        panel_repo: PanelRepository,
        calculation_client: CalculationClient | None = None,
    ):
        self.request_repo = request_repo
        self.item_repo = item_repo
        self.panel_repo = panel_repo
        self.calculation_client = calculation_client

    # -- helpers -------------------------------------------------------

    async def _load(self, request_id: int) -> SolarPanelRequest:
        request = await self.request_repo.get_with_items(request_id)
        if request is None:
            raise NotFound(REQUEST_NOT_FOUND)
        return request

    async def _load_owned(
        self, request_id: int, principal: Principal, allow_moderator: bool = False
    ) -> SolarPanelRequest:
        request = await self._load(request_id)
        if request.creator_id != principal.user_id and not (allow_moderator and principal.is_moderator):
            raise Forbidden(NOT_YOUR_REQUEST)
        return request

    @staticmethod
    def _require_status(request: SolarPanelRequest, expected: RequestStatus) -> None:
        if request.status != expected:
            raise Conflict(
                f"Solar panel request is {request.status.value}, this operation needs {expected.value}"
            )

    async def _stale(self, request_id: int, expected: RequestStatus) -> ServiceError:
        """Classify a conditional write that matched no rows."""
        current = await self.request_repo.get_status(request_id)
        if current is None or current == RequestStatus.DELETED:
            return NotFound(REQUEST_NOT_FOUND)
        logger.warning(
            "Stale write on request %s: expected %s, found %s", request_id, expected.value, current.value
        )
        return Conflict(
            f"Solar panel request is {current.value}, this operation needs {expected.value}"
        )

    async def _view(self, request_id: int) -> SolarPanelRequestResponse:
        return _to_response(await self._load(request_id))

    # -- reads ---------------------------------------------------------

    async def cart_summary(self, principal: Principal | None) -> CartSummary:
        """Draft id and item count for the badge in the UI. Anonymous callers get zeros."""
        if principal is None:
            return CartSummary()
        draft = await self.request_repo.get_draft(principal.user_id)
        if draft is None:
            return CartSummary()
        count = await self.request_repo.count_items(draft.id)
        return CartSummary(request_id=draft.id, panels_in_request=count)

    async def list_requests(
        self, principal: Principal, filter: RequestFilter
    ) -> list[SolarPanelRequestListItem]:
        """Moderators see every creator; users only their own. Drafts and deleted never listed."""
        creator_id = None if principal.is_moderator else principal.user_id
        requests = await self.request_repo.list_filtered(filter, creator_id=creator_id)
        return [_to_list_item(r) for r in requests]

    async def get_request(self, principal: Principal, request_id: int) -> SolarPanelRequestResponse:
        request = await self._load_owned(request_id, principal, allow_moderator=True)
        return _to_response(request)

    # -- draft editing -------------------------------------------------

    async def add_panel(self, principal: Principal, panel_id: int) -> PanelAddedResponse:
        """Put a panel into the caller's draft, creating the draft on first use."""
        panel = await self.panel_repo.get_active(panel_id)
        if panel is None:
            raise NotFound("Solar panel not found")

        draft = await self.request_repo.get_draft(principal.user_id)
        if draft is None:
            try:
                draft = await self.request_repo.create_draft(principal.user_id)
            except IntegrityError as exc:
                # Another call created the draft between our read and insert
                raise Conflict("Draft was created concurrently, retry the operation") from exc
            record_transition("created->draft")
            logger.info("Draft %s created for user %s", draft.id, principal.user_id)

        if await self.item_repo.contains(draft.id, panel_id):
            raise Conflict("Solar panel is already in the request")
        try:
            await self.item_repo.insert(draft.id, panel_id)
        except IntegrityError as exc:
            raise Conflict("Solar panel is already in the request") from exc
        await self.item_repo.commit()
        return PanelAddedResponse(request_id=draft.id, panel_id=panel_id)

    async def remove_panel(
        self, principal: Principal, request_id: int, panel_id: int
    ) -> SolarPanelRequestResponse:
        request = await self._load_owned(request_id, principal, allow_moderator=True)
        self._require_status(request, RequestStatus.DRAFT)
        if not await self.item_repo.remove(request_id, panel_id):
            if await self.request_repo.get_status(request_id) != RequestStatus.DRAFT:
                raise await self._stale(request_id, RequestStatus.DRAFT)
            raise NotFound("Solar panel is not in the request")
        await self.item_repo.commit()
        return await self._view(request_id)

    async def set_panel_area(
        self, principal: Principal, request_id: int, panel_id: int, area: float
    ) -> SolarPanelRequestResponse:
        request = await self._load_owned(request_id, principal)
        self._require_status(request, RequestStatus.DRAFT)
        if not is_valid_area(area):
            raise BadRequest("Area must be a positive number")
        if not await self.item_repo.set_area(request_id, panel_id, area):
            if await self.request_repo.get_status(request_id) != RequestStatus.DRAFT:
                raise await self._stale(request_id, RequestStatus.DRAFT)
            raise NotFound("Solar panel is not in the request")
        await self.item_repo.commit()
        return await self._view(request_id)

    async def set_insolation(
        self, principal: Principal, request_id: int, insolation: float
    ) -> SolarPanelRequestResponse:
        request = await self._load_owned(request_id, principal)
        self._require_status(request, RequestStatus.DRAFT)
        if not is_valid_insolation(insolation):
            raise BadRequest("Insolation must be greater than 0 and at most 10")
        if not await self.request_repo.set_insolation(request_id, insolation):
            raise await self._stale(request_id, RequestStatus.DRAFT)
        await self.request_repo.commit()
        return await self._view(request_id)

    # -- transitions ---------------------------------------------------

    async def form(self, principal: Principal, request_id: int) -> SolarPanelRequestResponse:
        request = await self._load_owned(request_id, principal)
        self._require_status(request, RequestStatus.DRAFT)
        validate_for_forming([item.area for item in request.items], request.insolation)
        if not await self.request_repo.mark_formed(request_id):
            raise await self._stale(request_id, RequestStatus.DRAFT)
        await self.request_repo.commit()
        record_transition("draft->formed")
        logger.info("Request %s formed by user %s", request_id, principal.user_id)
        return await self._view(request_id)

    async def delete(self, principal: Principal, request_id: int) -> None:
        request = await self._load_owned(request_id, principal)
        self._require_status(request, RequestStatus.DRAFT)
        if not await self.request_repo.mark_deleted(request_id):
            raise await self._stale(request_id, RequestStatus.DRAFT)
        await self.request_repo.commit()
        record_transition("draft->deleted")
        logger.info("Request %s deleted by user %s", request_id, principal.user_id)

    async def moderate(
        self, principal: Principal, request_id: int, action: str
    ) -> SolarPanelRequestResponse:
        """
        Complete or reject a formed request.

        Completing hands the items to the calculation service first; if that
        call fails nothing is written and the request stays formed, so the
        moderator can simply retry. Without a configured service the total is
        computed here and stored with the transition.
        """
        if not principal.is_moderator:
            raise Forbidden("Only moderators can moderate requests")
        request = await self.request_repo.get_by_id_and_status(request_id, RequestStatus.FORMED)
        if request is None:
            raise NotFound("Formed solar panel request not found")
        target = MODERATOR_ACTIONS.get(action)
        if target is None:
            raise BadRequest("Moderator action must be 'completed' or 'rejected'")

        total_power = None
        if target is RequestStatus.COMPLETED:
            panels = contributions_from_items(request.items)
            if self.calculation_client is None:
                total_power = calculate_total_power(panels, request.insolation)
            else:
                try:
                    await self.calculation_client.submit(request_id, panels, request.insolation)
                except CalculationServiceError as exc:
                    raise InternalError(
                        "Power calculation service is unavailable, request left formed"
                    ) from exc

        if not await self.request_repo.mark_moderated(
            request_id, target, principal.user_id, total_power=total_power
        ):
            raise await self._stale(request_id, RequestStatus.FORMED)
        # The calculation callback may arrive as soon as the response does
        await self.request_repo.commit()
        record_transition(f"formed->{target.value}")
        logger.info("Request %s %s by moderator %s", request_id, target.value, principal.user_id)
        return await self._view(request_id)

    async def apply_calculation_result(self, request_id: int, total_power: float) -> None:
        """Callback from the calculation service. Only completed requests take a result."""
        status = await self.request_repo.get_status(request_id)
        if status is None or status == RequestStatus.DELETED:
            raise NotFound(REQUEST_NOT_FOUND)
        if status != RequestStatus.COMPLETED:
            raise Conflict(f"Solar panel request is {status.value}, this operation needs completed")
        if not math.isfinite(total_power) or total_power < 0:
            raise BadRequest("Total power must be a non-negative number")
        if not await self.request_repo.set_total_power(request_id, total_power):
            raise await self._stale(request_id, RequestStatus.COMPLETED)
        await self.request_repo.commit()
        logger.info("Total power of request %s set to %s", request_id, total_power)
