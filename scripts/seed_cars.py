"""
Seed demo cars through the running API.

Posts a few sample cars to POST /cars and reads each one back so the
enrichment from the pricing and maps services is visible.

Usage:
    python scripts/seed_cars.py --base-url http://localhost:8000
"""

import argparse
import sys

import httpx

DEMO_CARS = [
    {
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
            "numberOfDoors": 4,
        },
        "location": {"lat": 40.730610, "lon": -73.935242},
    },
    {
        "condition": "NEW",
        "details": {
            "manufacturer": {"code": 102, "name": "Ford"},
            "model": "Focus",
            "mileage": 12,
            "externalColor": "blue",
            "body": "hatchback",
            "engine": "2.0L I4",
            "fuelType": "Gasoline",
            "modelYear": 2024,
            "productionYear": 2024,
            "numberOfDoors": 5,
        },
        "location": {"lat": 40.748817, "lon": -73.985428},
    },
]


def seed_cars(base_url: str) -> int:
    """Create the demo cars. Returns the number of failures."""

    failures = 0
    with httpx.Client(base_url=base_url, timeout=10) as client:
        for payload in DEMO_CARS:
            created = client.post("/cars", json=payload)
            if created.status_code != 201:
                print(f"[ERROR] Failed to create {payload['details']['model']}: {created.text}")
                failures += 1
                continue

            car_id = created.json()["id"]
            fetched = client.get(f"/cars/{car_id}").json()
            location = fetched["location"]
            print(f"[SUCCESS] Car {car_id}: {payload['details']['manufacturer']['name']} {payload['details']['model']}")
            print(f"  Price: {fetched.get('price') or 'unavailable'}")
            print(f"  Address: {location.get('address') or 'unavailable'}, {location.get('city') or ''}")

    return failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo cars through the Vehicles API")
    parser.add_argument("--base-url", default="http://localhost:8000", help="Vehicles API base URL")
    args = parser.parse_args()

    try:
        failures = seed_cars(args.base_url)
    except httpx.HTTPError as e:
        print(f"[ERROR] Could not reach {args.base_url}: {e}")
        sys.exit(1)

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
