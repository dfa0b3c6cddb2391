"""
Total power of a request.

Each panel's rated power is per its own reference area (width x height in mm),
so it is scaled to the installed area, summed, then scaled by site insolation:

    sum(power * area / (width * height / 1e6)) * insolation / 1000

Result is kW rounded to 2 decimals, half away from zero (0.125 -> 0.13).
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

MM2_PER_M2 = 1_000_000
W_PER_KW = 1000
TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class PanelContribution:
    """One request item as the calculation sees it (also the wire format of the external service)."""

    area: float
    power: float
    width: int
    height: int

    def normalized_power(self) -> float:
        reference_area = self.width * self.height / MM2_PER_M2
        return self.power * self.area / reference_area


def round_power(value: float) -> float:
    # Decimal(str(...)) rounds the printed value, not its binary approximation
    return float(Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def calculate_total_power(panels: Iterable[PanelContribution], insolation: float) -> float:
    total = sum(panel.normalized_power() for panel in panels)
    return round_power(total * insolation / W_PER_KW)


def contributions_from_items(items) -> list[PanelContribution]:
    """Map loaded RequestPanel rows (with their panel) to calculation inputs."""
    return [
        PanelContribution(
            area=item.area,
            power=float(item.panel.power),
            width=item.panel.width,
            height=item.panel.height,
        )
        for item in items
    ]
