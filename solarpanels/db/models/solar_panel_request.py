"""
Solar panel request - the aggregate root users build, form and get moderated.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarpanels.db.base import Base

if TYPE_CHECKING:
    from solarpanels.db.models.request_panel import RequestPanel
    from solarpanels.db.models.user import User


class RequestStatus(str, Enum):
    DRAFT = "draft"
    FORMED = "formed"
    COMPLETED = "completed"
    REJECTED = "rejected"
    DELETED = "deleted"


class SolarPanelRequest(Base):
    """
    One user's cart or submitted order.

    The draft is the user's cart: at most one per creator, guaranteed by a
    partial unique index rather than by application code.
    """

    __tablename__ = "solar_panel_requests"
    __table_args__ = (
        Index(
            "uq_solar_panel_requests_one_draft_per_creator",
            "creator_id",
            unique=True,
            postgresql_where=text("status = 'draft'"),
            sqlite_where=text("status = 'draft'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    status: Mapped[RequestStatus] = mapped_column(
        SAEnum(
            RequestStatus,
            name="request_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=RequestStatus.DRAFT,
        index=True,
    )
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    moderator_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    insolation: Mapped[float] = mapped_column(nullable=False, default=0.0)
    # NULL until computed (locally on completion or by the calculation callback)
    total_power: Mapped[float | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    formed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    creator: Mapped["User"] = relationship("User", foreign_keys=[creator_id])
    moderator: Mapped[Optional["User"]] = relationship("User", foreign_keys=[moderator_id])
    items: Mapped[list["RequestPanel"]] = relationship(
        "RequestPanel",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="RequestPanel.panel_id",
    )

    def __repr__(self) -> str:
        return f"<SolarPanelRequest(id={self.id}, status={self.status})>"
