"""Validation Kit — tests for pure rule checks.

Tests cover:
    - validate_capacity bounds and available-capacity bounds
    - validate_timing future departure, return after departure, aware datetimes
    - validate_coordinates and validate_address completeness
    - validate_items per-item messages
    - validate_pricing budget message with cents formatting
    - validate_url accepts http(s), rejects garbage
"""

from datetime import datetime, timedelta

from app.core.validation import (
    is_number, items_estimated_total, validate_address, validate_capacity,
    validate_coordinates, validate_items, validate_pricing, validate_timing,
    validate_url,
)
from tests.factories import NOW, make_address


# ─── validate_capacity ───────────────────────────────────────────

def test_capacity_within_bounds_is_valid():
    assert validate_capacity(1) == []
    assert validate_capacity(10) == []


def test_capacity_below_minimum():
    assert validate_capacity(0) == ["capacity: Capacity must be at least 1"]


def test_capacity_above_maximum():
    assert validate_capacity(11) == ["capacity: Capacity cannot exceed 10"]


def test_capacity_must_be_integer():
    assert validate_capacity(2.5) == ["capacity: Capacity must be an integer"]
    assert validate_capacity(True) == ["capacity: Capacity must be an integer"]


def test_available_capacity_cannot_exceed_total():
    errors = validate_capacity(3, 4)
    assert errors == [
        "available_capacity: Available capacity cannot exceed total capacity",
    ]


def test_available_capacity_cannot_be_negative():
    assert validate_capacity(3, -1) == [
        "available_capacity: Available capacity cannot be negative",
    ]


# ─── validate_timing ─────────────────────────────────────────────

def test_timing_valid():
    assert validate_timing(NOW + timedelta(hours=1), NOW + timedelta(hours=2), NOW) == []


def test_departure_in_past_rejected():
    errors = validate_timing(NOW - timedelta(minutes=1), NOW + timedelta(hours=2), NOW)
    assert errors == ["departure_time: Departure time must be in the future"]


def test_departure_equal_to_now_rejected():
    errors = validate_timing(NOW, NOW + timedelta(hours=2), NOW)
    assert "departure_time: Departure time must be in the future" in errors


def test_return_must_follow_departure():
    departure = NOW + timedelta(hours=1)
    errors = validate_timing(departure, departure, NOW)
    assert errors == [
        "estimated_return_time: Estimated return time must be after departure time",
    ]


def test_missing_times_reported_together():
    errors = validate_timing(None, None, NOW)
    assert len(errors) == 2


def test_naive_datetimes_rejected():
    naive = datetime(2030, 1, 1, 12, 0)
    assert validate_timing(naive, naive + timedelta(hours=1), NOW) == [
        "departure_time: Times must be timezone-aware",
    ]


# ─── coordinates / address ───────────────────────────────────────

def test_coordinates_at_bounds_are_valid():
    assert validate_coordinates(90, 180) == []
    assert validate_coordinates(-90, -180) == []


def test_coordinates_out_of_range():
    errors = validate_coordinates(90.1, -180.5)
    assert len(errors) == 2


def test_coordinates_reject_non_finite():
    assert validate_coordinates(float("nan"), 0) == [
        "coordinates.latitude: Latitude must be between -90 and 90",
    ]


def test_address_complete_dataclass_is_valid():
    assert validate_address(make_address()) == []


def test_address_reports_every_blank_field():
    errors = validate_address({"street": " ", "city": "X"}, "delivery_address")
    assert "delivery_address.street: Street is required" in errors
    assert "delivery_address.zip_code: Zip code is required" in errors
    assert len(errors) == 4


def test_address_missing_entirely():
    assert validate_address(None) == ["address: Address is required"]


# ─── items / pricing ─────────────────────────────────────────────

def test_items_required():
    assert validate_items([]) == ["items: At least one item is required"]


def test_item_errors_are_indexed():
    errors = validate_items([
        {"name": "Milk", "quantity": 1, "estimated_price": 1.0},
        {"name": "", "quantity": 0, "estimated_price": -1},
    ])
    assert errors == [
        "items[1].name: Name is required",
        "items[1].quantity: Quantity must be at least 1",
        "items[1].estimated_price: Estimated price cannot be negative",
    ]


def test_item_image_url_validated():
    errors = validate_items([
        {"name": "Milk", "quantity": 1, "estimated_price": 1.0, "image_url": "nope"},
    ])
    assert errors == ["items[0].image_url: 'nope' is not a valid URL"]


def test_items_estimated_total():
    items = [
        {"name": "Milk", "quantity": 2, "estimated_price": 3.50},
        {"name": "Bread", "quantity": 1, "estimated_price": 5.49},
    ]
    assert items_estimated_total(items) == 12.49


def test_pricing_over_budget_message():
    items = [
        {"name": "Milk", "quantity": 2, "estimated_price": 3.50},
        {"name": "Bread", "quantity": 1, "estimated_price": 5.49},
    ]
    assert validate_pricing(items, 5, 2) == [
        "items: Items total $12.49 exceeds maximum budget $5.00",
    ]


def test_pricing_at_budget_is_valid():
    items = [{"name": "Milk", "quantity": 2, "estimated_price": 2.50}]
    assert validate_pricing(items, 5.0, 0) == []


def test_pricing_negative_fee_and_budget():
    errors = validate_pricing([], -1, -0.01)
    assert errors == [
        "max_item_budget: Maximum item budget cannot be negative",
        "delivery_fee: Delivery fee cannot be negative",
    ]


# ─── urls / numbers ──────────────────────────────────────────────

def test_url_accepts_https():
    assert validate_url("https://cdn.example.com/receipts/1.jpg") == []


def test_url_rejects_garbage():
    assert validate_url("not a url", "photo_url") == [
        "photo_url: 'not a url' is not a valid URL",
    ]


def test_url_required():
    assert validate_url("", "receipt_url") == ["receipt_url: URL is required"]


def test_is_number_excludes_bool_and_inf():
    assert is_number(1.5)
    assert not is_number(True)
    assert not is_number(float("inf"))
