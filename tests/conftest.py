"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so tests can import domain,
repositories, clients, services and api, and provides stand-ins for the
pricing and maps services.
"""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.car import (  # noqa: E402
    Car,
    Condition,
    Details,
    Location,
    Manufacturer,
    PriceQuote,
    ResolvedAddress,
)
from domain.errors import DownstreamUnavailableError  # noqa: E402
from repositories.car_repository import InMemoryCarRepository  # noqa: E402
from services.car_service import CarService  # noqa: E402


class FakePricing:
    """Pricing stand-in: returns `quote`, or raises `error` when set."""

    def __init__(self, quote: Optional[PriceQuote] = None, error: Optional[Exception] = None) -> None:
        self.quote = quote
        self.error = error
        self.calls: List[int] = []

    def get_price(self, vehicle_id: int) -> Optional[PriceQuote]:
        self.calls.append(vehicle_id)
        if self.error is not None:
            raise self.error
        return self.quote


class FakeMaps:
    """Maps stand-in: returns `address`, or raises `error` when set."""

    def __init__(self, address: Optional[ResolvedAddress] = None, error: Optional[Exception] = None) -> None:
        self.address = address
        self.error = error
        self.calls: List[Tuple[float, float]] = []

    def get_address(self, lat: float, lon: float) -> Optional[ResolvedAddress]:
        self.calls.append((lat, lon))
        if self.error is not None:
            raise self.error
        return self.address


def make_car(condition: Condition = Condition.USED, lat: float = 40.730610, lon: float = -73.935242) -> Car:
    return Car(
        condition=condition,
        details=Details(
            manufacturer=Manufacturer(code=101, name="Chevrolet"),
            model="Impala",
            mileage=32280,
            external_color="white",
            body="sedan",
            engine="3.6L V6",
            fuel_type="Gasoline",
            model_year=2018,
            production_year=2018,
            number_of_doors=4,
        ),
        location=Location(lat=lat, lon=lon),
    )


@pytest.fixture
def repository() -> InMemoryCarRepository:
    return InMemoryCarRepository()


@pytest.fixture
def pricing() -> FakePricing:
    return FakePricing(quote=PriceQuote(vehicle_id=1, price=Decimal("1800.0"), currency="USD"))


@pytest.fixture
def maps() -> FakeMaps:
    return FakeMaps(
        address=ResolvedAddress(address="350 5th Ave", city="New York", state="NY", zip="10118")
    )


@pytest.fixture
def failing_pricing() -> FakePricing:
    return FakePricing(error=DownstreamUnavailableError("pricing", "status 503"))


@pytest.fixture
def failing_maps() -> FakeMaps:
    return FakeMaps(error=DownstreamUnavailableError("maps", "timeout"))


@pytest.fixture
def service(repository: InMemoryCarRepository, pricing: FakePricing, maps: FakeMaps) -> CarService:
    return CarService(repository=repository, pricing=pricing, maps=maps)
