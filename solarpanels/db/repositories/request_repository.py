"""
Solar panel request repository - aggregate loading, filtered listing and
status-guarded writes.

Every status change is a conditional UPDATE (WHERE id = ? AND status = ?).
A return value of False means zero rows matched: the caller lost a race or
the request is in another state, and must report it instead of ignoring it.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from solarpanels.db.models.request_panel import RequestPanel
from solarpanels.db.models.solar_panel_request import RequestStatus, SolarPanelRequest
from solarpanels.db.repositories.base_repository import BaseRepository

# Never shown in list views: drafts are carts, deleted requests are gone
HIDDEN_FROM_LISTS = (RequestStatus.DRAFT, RequestStatus.DELETED)


@dataclass
class RequestFilter:
    """Unset fields impose no constraint."""

    status: RequestStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class SolarPanelRequestRepository(BaseRepository[SolarPanelRequest]):
    """Request queries. Loads items, panels and users eagerly (no lazy loads in async code)."""

    def __init__(self, session):
        super().__init__(session, SolarPanelRequest)

    @staticmethod
    def _with_details(stmt):
        return stmt.options(
            selectinload(SolarPanelRequest.items).selectinload(RequestPanel.panel),
            selectinload(SolarPanelRequest.creator),
            selectinload(SolarPanelRequest.moderator),
        ).execution_options(populate_existing=True)

    async def get_with_items(self, request_id: int) -> SolarPanelRequest | None:
        """Any non-deleted request with its items."""
        result = await self.session.execute(
            self._with_details(
                select(SolarPanelRequest).where(
                    SolarPanelRequest.id == request_id,
                    SolarPanelRequest.status != RequestStatus.DELETED,
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_by_id_and_status(
        self, request_id: int, status: RequestStatus
    ) -> SolarPanelRequest | None:
        result = await self.session.execute(
            self._with_details(
                select(SolarPanelRequest).where(
                    SolarPanelRequest.id == request_id,
                    SolarPanelRequest.status == status,
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_status(self, request_id: int) -> RequestStatus | None:
        result = await self.session.execute(
            select(SolarPanelRequest.status).where(SolarPanelRequest.id == request_id)
        )
        return result.scalar_one_or_none()

    async def get_draft(self, creator_id: int) -> SolarPanelRequest | None:
        """The creator's cart, if any."""
        result = await self.session.execute(
            select(SolarPanelRequest).where(
                SolarPanelRequest.creator_id == creator_id,
                SolarPanelRequest.status == RequestStatus.DRAFT,
            )
        )
        return result.scalar_one_or_none()

    async def create_draft(self, creator_id: int) -> SolarPanelRequest:
        """Raises IntegrityError if the creator already has a draft."""
        return await self.add(
            SolarPanelRequest(creator_id=creator_id, status=RequestStatus.DRAFT, insolation=0.0)
        )

    async def count_items(self, request_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(RequestPanel).where(RequestPanel.request_id == request_id)
        )
        return result.scalar_one()

    async def list_filtered(
        self, filter: RequestFilter, creator_id: int | None = None
    ) -> list[SolarPanelRequest]:
        """Submitted requests, newest formed first. `creator_id=None` lists every creator."""
        stmt = select(SolarPanelRequest).where(SolarPanelRequest.status.not_in(HIDDEN_FROM_LISTS))
        if creator_id is not None:
            stmt = stmt.where(SolarPanelRequest.creator_id == creator_id)
        if filter.status is not None:
            stmt = stmt.where(SolarPanelRequest.status == filter.status)
        if filter.start_date is not None:
            stmt = stmt.where(SolarPanelRequest.formed_at >= filter.start_date)
        if filter.end_date is not None:
            stmt = stmt.where(SolarPanelRequest.formed_at <= filter.end_date)
        stmt = stmt.options(
            selectinload(SolarPanelRequest.creator),
            selectinload(SolarPanelRequest.moderator),
        ).order_by(SolarPanelRequest.formed_at.desc(), SolarPanelRequest.id.desc())
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _update_if_status(self, request_id: int, expected: RequestStatus, **values) -> bool:
        result = await self.session.execute(
            update(SolarPanelRequest)
            .where(SolarPanelRequest.id == request_id, SolarPanelRequest.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_insolation(self, request_id: int, insolation: float) -> bool:
        return await self._update_if_status(request_id, RequestStatus.DRAFT, insolation=insolation)

    async def mark_formed(self, request_id: int) -> bool:
        return await self._update_if_status(
            request_id,
            RequestStatus.DRAFT,
            status=RequestStatus.FORMED,
            formed_at=datetime.now(timezone.utc),
        )

    async def mark_moderated(
        self,
        request_id: int,
        status: RequestStatus,
        moderator_id: int,
        total_power: float | None = None,
    ) -> bool:
        return await self._update_if_status(
            request_id,
            RequestStatus.FORMED,
            status=status,
            moderator_id=moderator_id,
            moderated_at=datetime.now(timezone.utc),
            total_power=total_power,
        )

    async def mark_deleted(self, request_id: int) -> bool:
        return await self._update_if_status(
            request_id,
            RequestStatus.DRAFT,
            status=RequestStatus.DELETED,
            deleted_at=datetime.now(timezone.utc),
        )

    async def set_total_power(self, request_id: int, total_power: float) -> bool:
        return await self._update_if_status(
            request_id, RequestStatus.COMPLETED, total_power=total_power
        )
