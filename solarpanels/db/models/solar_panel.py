"""
Solar panel catalog entry. Referenced by request items, never owned by them.
"""

from sqlalchemy import CheckConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from solarpanels.db.base import Base


class SolarPanel(Base):
    """Panel definition: rated power (W) and physical size (mm)."""

    __tablename__ = "solar_panels"
    __table_args__ = (
        # Reference area width x height divides the rated power
        CheckConstraint("width > 0 AND height > 0 AND power >= 0", name="ck_solar_panels_dimensions"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    power: Mapped[int] = mapped_column(nullable=False)
    width: Mapped[int] = mapped_column(nullable=False)
    height: Mapped[int] = mapped_column(nullable=False)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    # Soft delete: hidden from new requests, still shown inside existing ones
    is_deleted: Mapped[bool] = mapped_column(default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<SolarPanel(id={self.id}, title={self.title})>"
