"""
Request item - a panel placed in a request with the area the user plans to cover.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from solarpanels.db.base import Base

if TYPE_CHECKING:
    from solarpanels.db.models.solar_panel import SolarPanel
    from solarpanels.db.models.solar_panel_request import SolarPanelRequest


class RequestPanel(Base):
    """Join entity between a request and a catalog panel. A panel appears once per request."""

    __tablename__ = "request_panels"
    __table_args__ = (
        UniqueConstraint("request_id", "panel_id", name="uq_request_panels_request_panel"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    request_id: Mapped[int] = mapped_column(
        ForeignKey("solar_panel_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    panel_id: Mapped[int] = mapped_column(ForeignKey("solar_panels.id"), nullable=False)
    # Square metres; 0 until the user sets it, must be positive before forming
    area: Mapped[float] = mapped_column(nullable=False, default=0.0)

    request: Mapped["SolarPanelRequest"] = relationship("SolarPanelRequest", back_populates="items")
    panel: Mapped["SolarPanel"] = relationship("SolarPanel")

    def __repr__(self) -> str:
        return f"<RequestPanel(request_id={self.request_id}, panel_id={self.panel_id}, area={self.area})>"
