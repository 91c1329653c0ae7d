"""Pricing service client: price quote for a vehicle id."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from clients._http import fetch_first
from domain.car import PriceQuote
from domain.errors import DownstreamUnavailableError

PRICE_PATH = "/services/price"


class PricingClient:
    """Thin wrapper over ``GET {base_url}/services/price?vehicleId=...``.

    Args:
        base_url: Root URL of the pricing service (e.g. http://localhost:8082)
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    name = "pricing"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def get_price(self, vehicle_id: int) -> Optional[PriceQuote]:
        """Return the first quote for ``vehicle_id``, or None if there is none.

        Raises:
            DownstreamUnavailableError: if the service cannot be reached or
                returns something that is not a price.
        """
        data = fetch_first(self._http, self.name, PRICE_PATH, {"vehicleId": vehicle_id})
        if data is None:
            return None

        try:
            return PriceQuote(
                vehicle_id=int(data.get("vehicleId", vehicle_id)),
                price=Decimal(str(data["price"])),
                currency=str(data["currency"]),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise DownstreamUnavailableError(self.name, "malformed price") from exc

    def close(self) -> None:
        self._http.close()
