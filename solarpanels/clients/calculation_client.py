"""
External power calculation service client.
The service answers 200 immediately and later PUTs the result to
/solarpanel-requests/{id}/update-total-power with the shared service token.
"""

import logging
from dataclasses import asdict
from typing import Annotated, Sequence

import httpx
from fastapi import Depends

from solarpanels.config import get_settings
from solarpanels.core.exceptions import CalculationServiceError
from solarpanels.observability.metrics import record_calculation_call
from solarpanels.services.power import PanelContribution

logger = logging.getLogger(__name__)

settings = get_settings()


class CalculationClient:
    """Submits formed requests for calculation. One POST per completed request, no retries."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def submit(
        self,
        request_id: int,
        panels: Sequence[PanelContribution],
        insolation: float,
    ) -> None:
        payload = {
            "request_id": request_id,
            "panels": [asdict(p) for p in panels],
            "insolation": insolation,
        }
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            try:
                response = await client.post("/calculate", json=payload)
            except httpx.HTTPError as exc:
                record_calculation_call("transport_error")
                logger.error("Calculation service unreachable for request %s: %s", request_id, exc)
                raise CalculationServiceError(str(exc)) from exc
        if response.status_code != httpx.codes.OK:
            record_calculation_call("rejected")
            logger.error(
                "Calculation service returned %s for request %s", response.status_code, request_id
            )
            raise CalculationServiceError(f"calculation service returned status {response.status_code}")
        record_calculation_call("accepted")
        logger.info("Request %s submitted for power calculation", request_id)


def get_calculation_client() -> CalculationClient | None:
    """None when no service is configured: power is then computed in-process."""
    if not settings.calculation_service_url:
        return None
    return CalculationClient(
        settings.calculation_service_url,
        timeout=settings.calculation_service_timeout,
    )


CalculationClientDep = Annotated[CalculationClient | None, Depends(get_calculation_client)]
