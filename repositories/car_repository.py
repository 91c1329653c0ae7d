"""
Car repository (persistence).

This module provides *only* persistence operations for the Car domain entity.
It does not enforce business rules (create-vs-update, enrichment); it only
inserts, updates, fetches and deletes car records.

Two stores share the same interface:
- SupabaseCarRepository: rows in the `cars` table of a Supabase project.
- InMemoryCarRepository: a process-local map, used for local runs and tests.

The price field is never written by either store.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol

from domain.car import Car, Condition, Details, Location, Manufacturer
from domain.time import require_utc_timestamp, utc_now

# Supabase table name for car records.
# Keep this aligned with your database schema.
_CARS_TABLE: str = "cars"


class CarRepository(Protocol):
    """Keyed CRUD storage for cars."""

    def find_all(self) -> List[Car]: ...

    def find_by_id(self, car_id: int) -> Optional[Car]: ...

    def exists(self, car_id: int) -> bool: ...

    def save(self, car: Car) -> Car: ...

    def delete(self, car_id: int) -> None: ...


def _to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _details_to_json(details: Details) -> dict[str, Any]:
    return {
        "manufacturer": {
            "code": details.manufacturer.code,
            "name": details.manufacturer.name,
        },
        "model": details.model,
        "mileage": details.mileage,
        "external_color": details.external_color,
        "body": details.body,
        "engine": details.engine,
        "fuel_type": details.fuel_type,
        "model_year": details.model_year,
        "production_year": details.production_year,
        "number_of_doors": details.number_of_doors,
    }


def _details_from_json(data: Mapping[str, Any]) -> Details:
    manufacturer = data["manufacturer"]
    return Details(
        manufacturer=Manufacturer(
            code=int(manufacturer["code"]),
            name=str(manufacturer["name"]),
        ),
        model=str(data["model"]),
        mileage=data.get("mileage"),
        external_color=data.get("external_color"),
        body=data.get("body"),
        engine=data.get("engine"),
        fuel_type=data.get("fuel_type"),
        model_year=data.get("model_year"),
        production_year=data.get("production_year"),
        number_of_doors=data.get("number_of_doors"),
    )


def _car_to_row(car: Car) -> dict[str, Any]:
    """Build the column payload for a car (id and price excluded)."""

    payload: dict[str, Any] = {
        "condition": car.condition.value,
        "details": _details_to_json(car.details),
        "lat": car.location.lat,
        "lon": car.location.lon,
        "address": car.location.address,
        "city": car.location.city,
        "state": car.location.state,
        "zip": car.location.zip,
    }
    if car.created_at is not None:
        payload["created_at_utc"] = _to_iso_utc(car.created_at, name="created_at")
    if car.modified_at is not None:
        payload["modified_at_utc"] = _to_iso_utc(car.modified_at, name="modified_at")
    return payload


def _row_to_car(row: Mapping[str, Any]) -> Car:
    """Convert a Supabase row into a Car."""

    return Car(
        id=int(row["id"]),
        condition=Condition(str(row["condition"])),
        details=_details_from_json(row["details"]),
        location=Location(
            lat=float(row["lat"]),
            lon=float(row["lon"]),
            address=row.get("address"),
            city=row.get("city"),
            state=row.get("state"),
            zip=row.get("zip"),
        ),
        created_at=_parse_utc_datetime(row["created_at_utc"]) if row.get("created_at_utc") else None,
        modified_at=_parse_utc_datetime(row["modified_at_utc"]) if row.get("modified_at_utc") else None,
    )


class SupabaseCarRepository:
    """Car store backed by a Supabase table with a bigint identity `id` column."""

    def __init__(self, client: Any = None, table: str = _CARS_TABLE) -> None:
        self._client = client
        self._table = table

    @property
    def client(self) -> Any:
        if self._client is None:
            from repositories.client import get_supabase

            self._client = get_supabase()
        return self._client

    def find_all(self) -> List[Car]:
        """
        Retrieve every stored car, ordered by id.

        Returns:
            List[Car] (possibly empty)
        """

        response = self.client.table(self._table).select("*").order("id").execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list cars: {error}")

        rows = getattr(response, "data", None) or []
        return [_row_to_car(row) for row in rows]

    def find_by_id(self, car_id: int) -> Optional[Car]:
        """
        Retrieve a single car by its id.

        Returns:
            Car or None if not found
        """

        response = (
            self.client.table(self._table)
            .select("*")
            .eq("id", car_id)
            .limit(1)
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to get car: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        return _row_to_car(rows[0])

    def exists(self, car_id: int) -> bool:
        response = (
            self.client.table(self._table)
            .select("id")
            .eq("id", car_id)
            .limit(1)
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to check car: {error}")

        return bool(getattr(response, "data", None))

    def save(self, car: Car) -> Car:
        """
        Insert a new car (no id) or overwrite the row for an existing id.

        Audit timestamps go into the row payload; ``car`` is not modified.
        The returned Car is built from the row Supabase hands back, so it
        carries the assigned id.
        """

        now = utc_now()
        stamped = replace(
            car,
            created_at=now if car.is_new else car.created_at,
            modified_at=now,
        )
        payload = _car_to_row(stamped)

        if car.is_new:
            response = self.client.table(self._table).insert(payload).execute()
            action = "insert"
        else:
            response = (
                self.client.table(self._table)
                .update(payload)
                .eq("id", car.id)
                .execute()
            )
            action = "update"

        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to {action} car: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            raise RuntimeError(f"Failed to {action} car: no row returned")
        return _row_to_car(rows[0])

    def delete(self, car_id: int) -> None:
        response = self.client.table(self._table).delete().eq("id", car_id).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete car: {error}")


class InMemoryCarRepository:
    """
    Process-local car store.

    Ids start at 1 and are never reused, even after deletes. Every read and
    write goes through a deep copy so callers can mutate returned cars (as
    enrichment does) without touching stored state.
    """

    def __init__(self) -> None:
        self._cars: Dict[int, Car] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def find_all(self) -> List[Car]:
        with self._lock:
            return [copy.deepcopy(self._cars[key]) for key in sorted(self._cars)]

    def find_by_id(self, car_id: int) -> Optional[Car]:
        with self._lock:
            car = self._cars.get(car_id)
            return copy.deepcopy(car) if car is not None else None

    def exists(self, car_id: int) -> bool:
        with self._lock:
            return car_id in self._cars

    def save(self, car: Car) -> Car:
        stored = copy.deepcopy(car)
        stored.price = None
        now = utc_now()

        with self._lock:
            if stored.is_new:
                stored.id = self._next_id
                self._next_id += 1
                stored.created_at = now
            elif stored.id not in self._cars:
                raise RuntimeError(f"Failed to update car: no row with id {stored.id}")
            stored.modified_at = now
            self._cars[stored.id] = stored
            return copy.deepcopy(stored)

    def delete(self, car_id: int) -> None:
        with self._lock:
            self._cars.pop(car_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cars)


__all__ = [
    "CarRepository",
    "SupabaseCarRepository",
    "InMemoryCarRepository",
]
