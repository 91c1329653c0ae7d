"""
Domain: Car entity and the transient enrichment records.

Rules implemented here:
- A Car is identified by an integer id assigned by the store on first save.
  The id is immutable once assigned.
- details and location are the only fields replaced on update.
- price is a display string filled in on read; it is never persisted.
- Enrichment may overwrite address/city/state/zip but never lat/lon.

Unlike the other domain records, Car and Location are mutable: enrichment
merges downstream answers into them in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp


class Condition(str, Enum):
    USED = "USED"
    NEW = "NEW"


@dataclass(frozen=True, slots=True)
class Manufacturer:
    code: int
    name: str


@dataclass(frozen=True, slots=True)
class Details:
    """
    Descriptive block for a car.

    The service never inspects these fields; on update the whole block is
    copied verbatim from the incoming car.
    """

    manufacturer: Manufacturer
    model: str
    mileage: Optional[int] = None
    external_color: Optional[str] = None
    body: Optional[str] = None
    engine: Optional[str] = None
    fuel_type: Optional[str] = None
    model_year: Optional[int] = None
    production_year: Optional[int] = None
    number_of_doors: Optional[int] = None


@dataclass(slots=True)
class Location:
    """Coordinates supplied by the caller plus an address filled in on read."""

    lat: float
    lon: float
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    def apply_address(self, resolved: "ResolvedAddress") -> None:
        """Overwrite the address fields; coordinates are left untouched."""
        self.address = resolved.address
        self.city = resolved.city
        self.state = resolved.state
        self.zip = resolved.zip


@dataclass(slots=True)
class Car:
    details: Details
    location: Location
    condition: Condition = Condition.USED
    id: Optional[int] = None
    price: Optional[str] = None  # display only, e.g. "1800.0USD"
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.modified_at is not None:
            require_utc_timestamp("modified_at", self.modified_at)

    @property
    def is_new(self) -> bool:
        """True until the store has assigned an id."""
        return self.id is None

    def apply_price(self, quote: "PriceQuote") -> None:
        self.price = quote.display()


@dataclass(frozen=True, slots=True)
class PriceQuote:
    """Price returned by the pricing service for one vehicle."""

    vehicle_id: int
    price: Decimal
    currency: str

    def display(self) -> str:
        """Amount followed directly by the currency code: ``1800.0USD``."""
        return f"{self.price}{self.currency}"


@dataclass(frozen=True, slots=True)
class ResolvedAddress:
    """Address returned by the maps service for a coordinate pair."""

    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


@dataclass(slots=True)
class EnrichmentStats:
    """
    Counters for enrichment outcomes since process start.

    A miss is any downstream error or empty answer. Misses are swallowed by
    the service, so this is the only place they remain visible.
    """

    price_hits: int = 0
    price_misses: int = 0
    address_hits: int = 0
    address_misses: int = 0
    errors: dict[str, int] = field(default_factory=dict)

    def record(self, enrichment: str, hit: bool, reason: Optional[str] = None) -> None:
        if enrichment == "price":
            if hit:
                self.price_hits += 1
            else:
                self.price_misses += 1
        elif enrichment == "address":
            if hit:
                self.address_hits += 1
            else:
                self.address_misses += 1
        else:
            raise ValueError(f"Unknown enrichment: {enrichment!r}")

        if reason is not None:
            key = f"{enrichment}:{reason}"
            self.errors[key] = self.errors.get(key, 0) + 1

    def as_dict(self) -> dict[str, object]:
        return {
            "price_hits": self.price_hits,
            "price_misses": self.price_misses,
            "address_hits": self.address_hits,
            "address_misses": self.address_misses,
            "errors": dict(self.errors),
        }
