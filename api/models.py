"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
JSON field names are camelCase (``fuelType``, ``numberOfDoors``); snake_case is
accepted on input too.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from domain.car import Car, Condition, Details, Location, Manufacturer


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        protected_namespaces = ()


# ============================================================================
# Car Models
# ============================================================================

class ManufacturerModel(CamelModel):
    code: int
    name: str = Field(..., min_length=1)


class DetailsModel(CamelModel):
    """Descriptive block; stored and returned verbatim."""
    manufacturer: ManufacturerModel
    model: str = Field(..., min_length=1)
    mileage: Optional[int] = Field(None, ge=0)
    external_color: Optional[str] = None
    body: Optional[str] = None
    engine: Optional[str] = None
    fuel_type: Optional[str] = None
    model_year: Optional[int] = None
    production_year: Optional[int] = None
    number_of_doors: Optional[int] = Field(None, ge=0)

    def to_domain(self) -> Details:
        return Details(
            manufacturer=Manufacturer(code=self.manufacturer.code, name=self.manufacturer.name),
            model=self.model,
            mileage=self.mileage,
            external_color=self.external_color,
            body=self.body,
            engine=self.engine,
            fuel_type=self.fuel_type,
            model_year=self.model_year,
            production_year=self.production_year,
            number_of_doors=self.number_of_doors,
        )

    @classmethod
    def from_domain(cls, details: Details) -> "DetailsModel":
        return cls(
            manufacturer=ManufacturerModel(
                code=details.manufacturer.code,
                name=details.manufacturer.name,
            ),
            model=details.model,
            mileage=details.mileage,
            external_color=details.external_color,
            body=details.body,
            engine=details.engine,
            fuel_type=details.fuel_type,
            model_year=details.model_year,
            production_year=details.production_year,
            number_of_doors=details.number_of_doors,
        )


class LocationModel(CamelModel):
    """Coordinates are required; address fields are filled in on read."""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    def to_domain(self) -> Location:
        return Location(
            lat=self.lat,
            lon=self.lon,
            address=self.address,
            city=self.city,
            state=self.state,
            zip=self.zip,
        )

    @classmethod
    def from_domain(cls, location: Location) -> "LocationModel":
        return cls(
            lat=location.lat,
            lon=location.lon,
            address=location.address,
            city=location.city,
            state=location.state,
            zip=location.zip,
        )


class CarRequest(CamelModel):
    """Body for POST /cars and PUT /cars/{id}. Any ``id`` in the body is ignored."""
    id: Optional[int] = None
    condition: Condition
    details: DetailsModel
    location: LocationModel

    class Config:
        json_schema_extra = {
            "example": {
                "condition": "USED",
                "details": {
                    "manufacturer": {"code": 101, "name": "Chevrolet"},
                    "model": "Impala",
                    "mileage": 32280,
                    "externalColor": "white",
                    "body": "sedan",
                    "engine": "3.6L V6",
                    "fuelType": "Gasoline",
                    "modelYear": 2018,
                    "productionYear": 2018,
                    "numberOfDoors": 4
                },
                "location": {"lat": 40.73061, "lon": -73.935242}
            }
        }

    def to_domain(self, car_id: Optional[int] = None) -> Car:
        return Car(
            id=car_id,
            condition=self.condition,
            details=self.details.to_domain(),
            location=self.location.to_domain(),
        )


class CarResponse(CamelModel):
    """Single car in API responses. ``price`` is only set on single-car reads."""
    id: int
    condition: Condition
    details: DetailsModel
    location: LocationModel
    price: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "condition": "USED",
                "details": {
                    "manufacturer": {"code": 101, "name": "Chevrolet"},
                    "model": "Impala",
                    "mileage": 32280,
                    "externalColor": "white",
                    "body": "sedan",
                    "engine": "3.6L V6",
                    "fuelType": "Gasoline",
                    "modelYear": 2018,
                    "productionYear": 2018,
                    "numberOfDoors": 4
                },
                "location": {
                    "lat": 40.748817,
                    "lon": -73.985428,
                    "address": "350 5th Ave",
                    "city": "New York",
                    "state": "NY",
                    "zip": "10118"
                },
                "price": "1800.0USD",
                "createdAt": "2025-01-01T12:00:00Z",
                "modifiedAt": "2025-01-01T12:00:00Z"
            }
        }

    @classmethod
    def from_domain(cls, car: Car) -> "CarResponse":
        if car.id is None:
            raise ValueError("Cannot serialize a car that has not been saved")
        return cls(
            id=car.id,
            condition=car.condition,
            details=DetailsModel.from_domain(car.details),
            location=LocationModel.from_domain(car.location),
            price=car.price,
            created_at=car.created_at,
            modified_at=car.modified_at,
        )


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Not found",
                "detail": "Car not found: 42",
                "status_code": 404
            }
        }
