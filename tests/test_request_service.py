"""
Request service and repository tests - validation rules and lost races on
status-guarded writes.
"""

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from solarpanels.core.dependencies import Principal
from solarpanels.core.exceptions import BadRequest, Conflict, Forbidden, NotFound
from solarpanels.db.models import RequestStatus, SolarPanel
from solarpanels.db.repositories import (
    PanelRepository,
    RequestPanelRepository,
    SolarPanelRequestRepository,
)
from solarpanels.services.request_service import (
    SolarPanelRequestService,
    parse_request_filter,
    validate_for_forming,
)


def principal_for(user) -> Principal:
    return Principal(user_id=user.id, role=user.role, token="token", expires_at=0)


@pytest.fixture
def request_repo(session):
    return SolarPanelRequestRepository(session)


@pytest.fixture
def item_repo(session):
    return RequestPanelRepository(session)


@pytest.fixture
def service(session, request_repo, item_repo):
    return SolarPanelRequestService(request_repo, item_repo, PanelRepository(session))


@pytest_asyncio.fixture
async def formed_id(request_repo, item_repo, test_user, panels) -> int:
    draft = await request_repo.create_draft(test_user.id)
    await item_repo.insert(draft.id, panels["reference"].id)
    assert await item_repo.set_area(draft.id, panels["reference"].id, 2.0)
    assert await request_repo.set_insolation(draft.id, 5.0)
    assert await request_repo.mark_formed(draft.id)
    return draft.id


class CompetingModerator:
    """Calculation client stub: while the call is in flight another moderator rejects the request."""

    def __init__(self, request_repo, moderator_id):
        self.request_repo = request_repo
        self.moderator_id = moderator_id
        self.calls = 0

    async def submit(self, request_id, panels, insolation):
        self.calls += 1
        await self.request_repo.mark_moderated(request_id, RequestStatus.REJECTED, self.moderator_id)


def test_validate_for_forming_accepts_complete_request():
    validate_for_forming([2.0, 0.5], 10.0)


@pytest.mark.parametrize(
    "areas, insolation",
    [
        ([2.0, 0.0], 5.0),
        ([float("nan")], 5.0),
        ([float("inf")], 5.0),
        ([2.0], 0.0),
        ([2.0], 10.01),
        ([2.0], float("nan")),
    ],
)
def test_validate_for_forming_rejects(areas, insolation):
    with pytest.raises(BadRequest):
        validate_for_forming(areas, insolation)


def test_parse_request_filter():
    request_filter = parse_request_filter("formed", "01-02-2024 10:30:00", None)
    assert request_filter.status is RequestStatus.FORMED
    assert (request_filter.start_date.day, request_filter.start_date.month) == (1, 2)
    assert request_filter.start_date.tzinfo is not None
    assert request_filter.end_date is None

    empty = parse_request_filter(None, "", None)
    assert (empty.status, empty.start_date, empty.end_date) == (None, None, None)


def test_parse_request_filter_rejects_bad_input():
    with pytest.raises(BadRequest):
        parse_request_filter("archived", None, None)
    with pytest.raises(BadRequest):
        parse_request_filter(None, None, "31-02-2024 00:00:00")


@pytest.mark.asyncio
async def test_one_draft_per_creator(request_repo, test_user):
    await request_repo.create_draft(test_user.id)
    with pytest.raises(IntegrityError):
        await request_repo.create_draft(test_user.id)


@pytest.mark.asyncio
async def test_conditional_write_applies_once(request_repo, formed_id, moderator):
    assert await request_repo.mark_moderated(formed_id, RequestStatus.COMPLETED, moderator.id, 1.5)
    assert not await request_repo.mark_moderated(formed_id, RequestStatus.REJECTED, moderator.id)
    assert await request_repo.get_status(formed_id) == RequestStatus.COMPLETED


@pytest.mark.asyncio
async def test_item_writes_need_draft(item_repo, formed_id, panels):
    assert not await item_repo.set_area(formed_id, panels["reference"].id, 3.0)
    assert not await item_repo.remove(formed_id, panels["reference"].id)


@pytest.mark.asyncio
async def test_moderation_lost_race_is_conflict(service, request_repo, formed_id, moderator, other_user):
    other_moderator = CompetingModerator(request_repo, other_user.id)
    service.calculation_client = other_moderator

    with pytest.raises(Conflict):
        await service.moderate(principal_for(moderator), formed_id, "completed")

    assert other_moderator.calls == 1
    assert await request_repo.get_status(formed_id) == RequestStatus.REJECTED


@pytest.mark.asyncio
async def test_moderate_requires_moderator_role(service, formed_id, test_user):
    with pytest.raises(Forbidden):
        await service.moderate(principal_for(test_user), formed_id, "completed")


@pytest.mark.asyncio
async def test_moderate_completed_stores_local_total(service, formed_id, moderator):
    view = await service.moderate(principal_for(moderator), formed_id, "completed")
    assert view.status == RequestStatus.COMPLETED
    assert view.total_power == 1.5


@pytest.mark.asyncio
async def test_calculation_result_for_unknown_request(service):
    with pytest.raises(NotFound):
        await service.apply_calculation_result(99999, 1.0)


@pytest.mark.asyncio
async def test_calculation_result_rejects_negative_power(service, formed_id, moderator):
    await service.moderate(principal_for(moderator), formed_id, "completed")
    with pytest.raises(BadRequest):
        await service.apply_calculation_result(formed_id, -1.0)


@pytest.mark.asyncio
async def test_deleted_request_is_not_found(service, request_repo, test_user, panels):
    principal = principal_for(test_user)
    added = await service.add_panel(principal, panels["reference"].id)
    await service.delete(principal, added.request_id)

    assert await request_repo.get_status(added.request_id) == RequestStatus.DELETED
    with pytest.raises(NotFound):
        await service.get_request(principal, added.request_id)
    with pytest.raises(NotFound):
        await service.set_insolation(principal, added.request_id, 5.0)


@pytest.mark.asyncio
async def test_cart_summary(service, test_user, panels):
    principal = principal_for(test_user)
    assert (await service.cart_summary(principal)).request_id == 0

    added = await service.add_panel(principal, panels["reference"].id)
    await service.add_panel(principal, panels["square"].id)
    summary = await service.cart_summary(principal)
    assert (summary.request_id, summary.panels_in_request) == (added.request_id, 2)
    assert (await service.cart_summary(None)).panels_in_request == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("width, height, power", [(0, 1000, 300), (1000, 0, 300), (1000, 1000, -1)])
async def test_panel_dimensions_must_be_positive(session, width, height, power):
    session.add(SolarPanel(title="Broken", type="mono", power=power, width=width, height=height))
    with pytest.raises(IntegrityError):
        await session.flush()
