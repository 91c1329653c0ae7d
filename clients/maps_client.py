"""Maps service client: reverse geocoding of a coordinate pair."""

from __future__ import annotations

from typing import Optional

import httpx

from clients._http import fetch_first
from domain.car import ResolvedAddress

MAPS_PATH = "/maps"


def _text(value: object) -> Optional[str]:
    return None if value is None else str(value)


class MapsClient:
    """Thin wrapper over ``GET {base_url}/maps?lat=...&lon=...``."""

    name = "maps"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def get_address(self, lat: float, lon: float) -> Optional[ResolvedAddress]:
        """Return the first address for (lat, lon), or None if there is none."""
        data = fetch_first(self._http, self.name, MAPS_PATH, {"lat": lat, "lon": lon})
        if data is None:
            return None

        return ResolvedAddress(
            address=_text(data.get("address")),
            city=_text(data.get("city")),
            state=_text(data.get("state")),
            zip=_text(data.get("zip")),
        )

    def close(self) -> None:
        self._http.close()
