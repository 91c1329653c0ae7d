"""
Domain errors shared by the service and the API layer.

Only CarNotFoundError is meant to cross the service boundary. Downstream
failures are raised by the HTTP clients and absorbed by the car service.
"""

from __future__ import annotations

from typing import Optional


class CarNotFoundError(LookupError):
    """Raised when an operation addresses a car id that is not stored."""

    def __init__(self, car_id: Optional[int] = None) -> None:
        self.car_id = car_id
        message = "Car not found" if car_id is None else f"Car not found: {car_id}"
        super().__init__(message)


class DownstreamUnavailableError(RuntimeError):
    """Raised when the pricing or maps service cannot produce a usable answer."""

    def __init__(self, service: str, reason: str) -> None:
        self.service = service
        self.reason = reason
        super().__init__(f"{service} unavailable: {reason}")
