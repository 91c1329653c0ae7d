"""
Cars API Endpoints.

CRUD endpoints for vehicle records. Single-car reads are enriched with a
price and a street address from the downstream services.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_car_service
from api.models import CarRequest, CarResponse, ErrorResponse
from domain.errors import CarNotFoundError
from services.car_service import CarService

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Car not found"}}


@router.get(
    "/cars",
    response_model=List[CarResponse],
    summary="List Cars",
    description="List every stored car. Cars in the list are not enriched."
)
def list_cars(service: CarService = Depends(get_car_service)):
    try:
        return [CarResponse.from_domain(car) for car in service.list_cars()]
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list cars: {str(e)}"
        )


@router.get(
    "/cars/{car_id}",
    response_model=CarResponse,
    responses=_NOT_FOUND,
    summary="Get Car",
    description="Get a single car with its current price and street address."
)
def get_car(car_id: int, service: CarService = Depends(get_car_service)):
    """
    Get a car by id.

    **Enrichment:**
    - `price` comes from the pricing service, e.g. `"1800.0USD"`
    - `location.address/city/state/zip` come from the maps service

    Both are best-effort. If a downstream service is down or has no answer,
    the field is left as stored and the request still succeeds.
    """
    try:
        car = service.find_by_id(car_id)
        return CarResponse.from_domain(car)

    except CarNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to get car: {str(e)}"
        )


@router.post(
    "/cars",
    response_model=CarResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Car",
    description="Create a new car. The id is assigned by the store."
)
def create_car(request: CarRequest, service: CarService = Depends(get_car_service)):
    try:
        created = service.save(request.to_domain())
        return CarResponse.from_domain(created)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create car: {str(e)}"
        )


@router.put(
    "/cars/{car_id}",
    response_model=CarResponse,
    responses=_NOT_FOUND,
    summary="Update Car",
    description="Replace the details and location of an existing car."
)
def update_car(car_id: int, request: CarRequest, service: CarService = Depends(get_car_service)):
    """
    Update a car.

    Only `details` and `location` are copied onto the stored car. Every other
    field in the body is ignored, including `condition`.
    """
    try:
        updated = service.save(request.to_domain(car_id=car_id))
        return CarResponse.from_domain(updated)

    except CarNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update car: {str(e)}"
        )


@router.delete(
    "/cars/{car_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_NOT_FOUND,
    summary="Delete Car"
)
def delete_car(car_id: int, service: CarService = Depends(get_car_service)):
    try:
        removed = service.delete(car_id)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete car: {str(e)}"
        )

    if not removed:
        raise HTTPException(status_code=404, detail=f"Car not found: {car_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
