"""
Service wiring for the API.

Routers depend on get_car_service(); tests replace it through
app.dependency_overrides.
"""

from __future__ import annotations

import threading
from functools import lru_cache
from typing import Optional

from api.settings import Settings
from clients.maps_client import MapsClient
from clients.pricing_client import PricingClient
from repositories.car_repository import (
    CarRepository,
    InMemoryCarRepository,
    SupabaseCarRepository,
)
from services.car_service import CarService


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def build_repository(settings: Settings) -> CarRepository:
    if settings.car_store == "supabase":
        return SupabaseCarRepository(table=settings.cars_table)
    return InMemoryCarRepository()


def build_car_service(settings: Settings) -> CarService:
    return CarService(
        repository=build_repository(settings),
        pricing=PricingClient(
            settings.pricing_base_url,
            timeout=settings.downstream_timeout_seconds,
        ),
        maps=MapsClient(
            settings.maps_base_url,
            timeout=settings.downstream_timeout_seconds,
        ),
    )


_car_service: Optional[CarService] = None
_car_service_lock = threading.Lock()


def get_car_service() -> CarService:
    """Process-wide CarService built from the environment on first use."""
    global _car_service
    if _car_service is None:
        with _car_service_lock:
            if _car_service is None:
                _car_service = build_car_service(get_settings())
    return _car_service


def close_car_service() -> None:
    """Close the downstream HTTP clients of the process-wide service, if built."""
    global _car_service
    with _car_service_lock:
        service, _car_service = _car_service, None
    if service is None:
        return
    for client in (service.pricing, service.maps):
        close = getattr(client, "close", None)
        if close is not None:
            close()
