"""
Car service: reads, upserts and deletes cars, enriching single-car reads.

Handles:
- Listing stored cars (unenriched)
- Single-car reads enriched with a price (pricing service) and a street
  address (maps service), both best-effort
- Upsert: create when the car has no id, otherwise replace details and
  location on the stored record
- Delete after a direct existence check against the store

Enrichment failures never fail a request. They are logged and counted in
EnrichmentStats, and the affected fields keep their stored values.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Protocol

from domain.car import Car, EnrichmentStats, PriceQuote, ResolvedAddress
from domain.errors import CarNotFoundError, DownstreamUnavailableError
from repositories.car_repository import CarRepository

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    def get_price(self, vehicle_id: int) -> Optional[PriceQuote]: ...


class AddressSource(Protocol):
    def get_address(self, lat: float, lon: float) -> Optional[ResolvedAddress]: ...


class CarService:
    """
    Aggregates the car store with the pricing and maps services.

    Args:
        repository: Keyed car store
        pricing: Source of price quotes by vehicle id
        maps: Source of addresses by coordinates
    """

    def __init__(
        self,
        repository: CarRepository,
        pricing: PriceSource,
        maps: AddressSource,
    ) -> None:
        self.repository = repository
        self.pricing = pricing
        self.maps = maps
        self.stats = EnrichmentStats()
        self._stats_lock = threading.Lock()

    def list_cars(self) -> List[Car]:
        """Return every stored car without enrichment."""
        return self.repository.find_all()

    def find_by_id(self, car_id: Optional[int]) -> Optional[Car]:
        """
        Load a car and enrich it with price and address.

        Returns:
            The enriched Car, or None when car_id is None

        Raises:
            CarNotFoundError: If no car is stored under car_id
        """
        if car_id is None:
            return None

        car = self.repository.find_by_id(car_id)
        if car is None:
            raise CarNotFoundError(car_id)

        quote = self._fetch_price(car_id)
        if quote is not None:
            car.apply_price(quote)

        resolved = self._fetch_address(car)
        if resolved is not None:
            car.location.apply_address(resolved)

        return car

    def save(self, car: Car) -> Car:
        """
        Create or update a car.

        A car without an id is inserted as-is and the store assigns the id.
        A car with an id must already be stored: only its details and
        location are copied onto the stored record, everything else on the
        stored record (condition, timestamps) is kept.

        Raises:
            CarNotFoundError: If car.id is set but not stored (nothing is written)
        """
        if car.is_new:
            created = self.repository.save(car)
            logger.info(f"Created car {created.id}", extra={"vehicle_id": created.id})
            return created

        existing = self.repository.find_by_id(car.id)
        if existing is None:
            raise CarNotFoundError(car.id)

        existing.details = car.details
        existing.location = car.location
        updated = self.repository.save(existing)
        logger.info(f"Updated car {updated.id}", extra={"vehicle_id": updated.id})
        return updated

    def delete(self, car_id: Optional[int]) -> bool:
        """
        Remove a car if it is stored.

        Unknown or missing ids are a silent no-op. No downstream calls are made.

        Returns:
            True if a record was removed, False otherwise
        """
        if car_id is None or not self.repository.exists(car_id):
            return False

        self.repository.delete(car_id)
        logger.info(f"Deleted car {car_id}", extra={"vehicle_id": car_id})
        return True

    def enrichment_stats(self) -> dict[str, object]:
        with self._stats_lock:
            return self.stats.as_dict()

    def _fetch_price(self, car_id: int) -> Optional[PriceQuote]:
        try:
            quote = self.pricing.get_price(car_id)
        except DownstreamUnavailableError as e:
            self._miss("price", car_id, e.reason)
            return None

        if quote is None:
            self._miss("price", car_id, None)
            return None

        self._hit("price")
        return quote

    def _fetch_address(self, car: Car) -> Optional[ResolvedAddress]:
        try:
            resolved = self.maps.get_address(car.location.lat, car.location.lon)
        except DownstreamUnavailableError as e:
            self._miss("address", car.id, e.reason)
            return None

        if resolved is None:
            self._miss("address", car.id, None)
            return None

        self._hit("address")
        return resolved

    def _hit(self, enrichment: str) -> None:
        with self._stats_lock:
            self.stats.record(enrichment, hit=True)

    def _miss(self, enrichment: str, car_id: Optional[int], reason: Optional[str]) -> None:
        with self._stats_lock:
            self.stats.record(enrichment, hit=False, reason=reason)

        logger.warning(
            f"{enrichment} enrichment skipped for car {car_id}",
            extra={
                "vehicle_id": car_id,
                "enrichment": enrichment,
                "reason": reason or "empty response",
            },
        )


__all__ = [
    "CarService",
    "PriceSource",
    "AddressSource",
]
