"""
Tests for `services/car_service.py`.

Covers contract rules:
- FindById of an unknown id raises CarNotFoundError; a None id returns None.
- Enrichment is best-effort: downstream errors or empty replies leave the
  fields as stored and never fail the read.
- Save without an id creates; save with an unknown id raises and writes
  nothing; save with a known id replaces only details and location.
- Delete is a no-op for unknown ids, makes no downstream calls, and removes
  known ids.
"""

from __future__ import annotations

import logging

import httpx
import pytest

from clients.maps_client import MapsClient
from clients.pricing_client import PricingClient
from conftest import FakeMaps, FakePricing, make_car
from domain.car import Condition, Details, Location, Manufacturer
from domain.errors import CarNotFoundError
from repositories.car_repository import InMemoryCarRepository
from services.car_service import CarService


class CountingRepository(InMemoryCarRepository):
    """In-memory store that counts writes and deletes."""

    def __init__(self) -> None:
        super().__init__()
        self.writes = 0
        self.deletes = 0

    def save(self, car):
        self.writes += 1
        return super().save(car)

    def delete(self, car_id):
        self.deletes += 1
        super().delete(car_id)


# ============================================================================
# List
# ============================================================================

def test_list_returns_all_cars_unenriched(service: CarService, pricing: FakePricing, maps: FakeMaps) -> None:
    service.save(make_car())
    service.save(make_car())

    cars = service.list_cars()

    assert len(cars) == 2
    assert all(car.price is None for car in cars)
    assert all(car.location.address is None for car in cars)
    assert pricing.calls == []
    assert maps.calls == []


# ============================================================================
# FindById
# ============================================================================

def test_find_by_id_none_returns_none(service: CarService, pricing: FakePricing) -> None:
    assert service.find_by_id(None) is None
    assert pricing.calls == []


def test_find_by_id_unknown_raises_not_found(service: CarService) -> None:
    for car_id in (1, 42, 10_000):
        with pytest.raises(CarNotFoundError) as exc_info:
            service.find_by_id(car_id)
        assert exc_info.value.car_id == car_id


def test_find_by_id_merges_price(service: CarService, pricing: FakePricing) -> None:
    created = service.save(make_car())

    car = service.find_by_id(created.id)

    assert car.price == "1800.0USD"
    assert pricing.calls == [created.id]


def test_find_by_id_merges_address_and_keeps_coordinates(service: CarService, maps: FakeMaps) -> None:
    created = service.save(make_car(lat=40.748817, lon=-73.985428))

    car = service.find_by_id(created.id)

    assert maps.calls == [(40.748817, -73.985428)]
    assert car.location.address == "350 5th Ave"
    assert car.location.city == "New York"
    assert car.location.state == "NY"
    assert car.location.zip == "10118"
    assert car.location.lat == 40.748817
    assert car.location.lon == -73.985428


def test_find_by_id_survives_both_downstreams_failing(
    repository: InMemoryCarRepository,
    failing_pricing: FakePricing,
    failing_maps: FakeMaps,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Verify the base car is returned when both enrichment calls error."""

    service = CarService(repository=repository, pricing=failing_pricing, maps=failing_maps)
    created = service.save(make_car())

    with caplog.at_level(logging.WARNING, logger="services.car_service"):
        car = service.find_by_id(created.id)

    assert car.id == created.id
    assert car.details == created.details
    assert car.condition == created.condition
    assert car.price is None
    assert car.location.address is None
    assert car.location.city is None

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert {record.enrichment for record in warnings} == {"price", "address"}

    stats = service.enrichment_stats()
    assert stats["price_misses"] == 1
    assert stats["address_misses"] == 1
    assert stats["errors"] == {"price:status 503": 1, "address:timeout": 1}


def test_find_by_id_one_downstream_failing_keeps_the_other(
    repository: InMemoryCarRepository,
    pricing: FakePricing,
    failing_maps: FakeMaps,
) -> None:
    service = CarService(repository=repository, pricing=pricing, maps=failing_maps)
    created = service.save(make_car())

    car = service.find_by_id(created.id)

    assert car.price == "1800.0USD"
    assert car.location.address is None


def test_find_by_id_with_closed_http_clients_returns_base_car(repository: InMemoryCarRepository) -> None:
    pricing = PricingClient("http://pricing.test", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    maps = MapsClient("http://maps.test", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    pricing.close()
    maps.close()
    service = CarService(repository=repository, pricing=pricing, maps=maps)
    created = service.save(make_car())

    car = service.find_by_id(created.id)

    assert car.id == created.id
    assert car.price is None
    assert service.enrichment_stats()["errors"] == {
        "price:client closed": 1,
        "address:client closed": 1,
    }


def test_find_by_id_empty_replies_leave_stored_fields(repository: InMemoryCarRepository) -> None:
    service = CarService(repository=repository, pricing=FakePricing(), maps=FakeMaps())
    stored = make_car()
    stored.location.city = "Queens"
    created = service.save(stored)

    car = service.find_by_id(created.id)

    assert car.price is None
    assert car.location.city == "Queens"
    assert service.enrichment_stats()["price_misses"] == 1
    assert service.enrichment_stats()["errors"] == {}


def test_find_by_id_does_not_persist_enrichment(service: CarService, repository: InMemoryCarRepository) -> None:
    created = service.save(make_car())

    service.find_by_id(created.id)

    stored = repository.find_by_id(created.id)
    assert stored.price is None
    assert stored.location.address is None


# ============================================================================
# Save
# ============================================================================

def test_save_without_id_creates_with_fresh_ids(service: CarService) -> None:
    ids = {service.save(make_car()).id for _ in range(5)}

    assert None not in ids
    assert len(ids) == 5


def test_save_with_unknown_id_raises_and_writes_nothing(pricing: FakePricing, maps: FakeMaps) -> None:
    repository = CountingRepository()
    service = CarService(repository=repository, pricing=pricing, maps=maps)
    car = make_car()
    car.id = 99

    with pytest.raises(CarNotFoundError):
        service.save(car)

    assert repository.writes == 0
    assert len(repository) == 0


def test_save_with_known_id_replaces_only_details_and_location(pricing: FakePricing, maps: FakeMaps) -> None:
    repository = CountingRepository()
    service = CarService(repository=repository, pricing=pricing, maps=maps)
    created = service.save(make_car(condition=Condition.USED))
    assert repository.writes == 1

    incoming = make_car(condition=Condition.NEW)
    incoming.id = created.id
    incoming.details = Details(
        manufacturer=Manufacturer(code=102, name="Ford"),
        model="Focus",
        mileage=100,
    )
    incoming.location = Location(lat=34.0522, lon=-118.2437)
    incoming.price = "1USD"

    updated = service.save(incoming)

    assert repository.writes == 2
    assert updated.id == created.id
    assert updated.details == incoming.details
    assert updated.location.lat == 34.0522
    assert updated.location.lon == -118.2437
    assert updated.condition == Condition.USED
    assert updated.created_at == created.created_at
    assert updated.price is None

    stored = repository.find_by_id(created.id)
    assert stored.condition == Condition.USED
    assert stored.details.manufacturer.name == "Ford"


# ============================================================================
# Delete
# ============================================================================

def test_delete_unknown_id_is_noop(pricing: FakePricing, maps: FakeMaps) -> None:
    repository = CountingRepository()
    service = CarService(repository=repository, pricing=pricing, maps=maps)
    service.save(make_car())

    assert service.delete(12345) is False
    assert service.delete(None) is False
    assert repository.deletes == 0
    assert len(repository) == 1


def test_delete_known_id_removes_without_downstream_calls(
    service: CarService, pricing: FakePricing, maps: FakeMaps
) -> None:
    created = service.save(make_car())

    assert service.delete(created.id) is True
    assert pricing.calls == []
    assert maps.calls == []

    with pytest.raises(CarNotFoundError):
        service.find_by_id(created.id)
