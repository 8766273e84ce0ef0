"""Test factories — valid entities and payloads with a fixed clock.

Every factory accepts overrides so a test states only what it cares about.
"""

import uuid
from datetime import datetime, timedelta, timezone

from app.core.entities import Address, Coordinates, Location
from app.core.trip_lifecycle import create_trip
from app.core.request_lifecycle import create_request

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

STORE_COORDS = Coordinates(latitude=40.7128, longitude=-74.0060)


def make_address(**overrides) -> Address:
    fields = {
        "street": "1 Market St", "city": "Springfield", "state": "IL",
        "zip_code": "62701", "country": "US",
    }
    fields.update(overrides)
    return Address(**fields)


def make_location(**overrides) -> Location:
    fields = {
        "name": "Corner Grocery",
        "address": make_address(),
        "coordinates": Coordinates(STORE_COORDS.latitude, STORE_COORDS.longitude),
    }
    fields.update(overrides)
    return Location(**fields)


def trip_data(**overrides) -> dict:
    data = {
        "owner_id": uuid.uuid4(),
        "destination": make_location(),
        "departure_time": NOW + timedelta(hours=1),
        "estimated_return_time": NOW + timedelta(hours=3),
        "capacity": 3,
        "description": "Weekly grocery run",
    }
    data.update(overrides)
    return data


def make_trip(**overrides):
    return create_trip(trip_data(**overrides), now=NOW)


def request_data(**overrides) -> dict:
    data = {
        "trip_id": uuid.uuid4(),
        "requester_id": uuid.uuid4(),
        "items": [
            {"name": "Milk", "quantity": 2, "estimated_price": 3.50},
            {"name": "Bread", "quantity": 1, "estimated_price": 5.49},
        ],
        "delivery_address": {
            "street": "9 Elm St", "city": "Springfield", "state": "IL",
            "zip_code": "62704", "country": "US",
        },
        "max_item_budget": 15.00,
        "delivery_fee": 4.00,
    }
    data.update(overrides)
    return data


def make_request(now: datetime = NOW, **overrides):
    return create_request(request_data(**overrides), now=now)


# ─── HTTP payloads ───────────────────────────────────────────────
# Route tests run against the wall clock, so trip times are relative to now.

def location_payload(**overrides) -> dict:
    body = {
        "name": "Corner Grocery",
        "address": {
            "street": "1 Market St", "city": "Springfield", "state": "IL",
            "zip_code": "62701", "country": "US",
        },
        "coordinates": {
            "latitude": STORE_COORDS.latitude, "longitude": STORE_COORDS.longitude,
        },
        "category": "grocery",
    }
    body.update(overrides)
    return body


def trip_payload(destination_id, **overrides) -> dict:
    departure = datetime.now(timezone.utc) + timedelta(hours=2)
    body = {
        "owner_id": str(uuid.uuid4()),
        "destination_id": str(destination_id),
        "departure_time": departure.isoformat(),
        "estimated_return_time": (departure + timedelta(hours=2)).isoformat(),
        "capacity": 2,
        "description": "Saturday market run",
    }
    body.update(overrides)
    return body


def request_payload(trip_id, **overrides) -> dict:
    body = {
        key: value for key, value in request_data().items()
        if key not in ("trip_id", "requester_id")
    }
    body.update(trip_id=str(trip_id), requester_id=str(uuid.uuid4()))
    body.update(overrides)
    return body
