"""Validation Kit — pure rule checks shared by every lifecycle module.

Invariants:
    - All functions are PURE: no IO, no mutation of their inputs
    - Every check returns list[str] of violations; empty list means valid
    - Callers concatenate lists so a ValidationError reports ALL violations
    - Item/address inputs may be mappings (API payloads) or entity dataclasses

Design Decisions:
    - list[str] over raising on first failure: creation must surface every rule broken
    - URL syntax delegated to pydantic's AnyHttpUrl (same validator the API schemas use)
"""

import math
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Mapping

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.domain_types import MIN_TRIP_CAPACITY, MAX_TRIP_CAPACITY

_URL_ADAPTER = TypeAdapter(AnyHttpUrl)

ADDRESS_FIELDS: tuple[str, ...] = ("street", "city", "state", "zip_code", "country")


def is_number(value: Any) -> bool:
    """True for finite int/float values (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def as_mapping(value: Any) -> Mapping[str, Any] | None:
    """Normalize a dataclass or mapping input; None for anything else."""
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, Mapping):
        return value
    return None


# ─── Trip rules ──────────────────────────────────────────────────

def validate_capacity(capacity: Any, available: Any = None) -> list[str]:
    errors: list[str] = []
    if not isinstance(capacity, int) or isinstance(capacity, bool):
        return ["capacity: Capacity must be an integer"]
    if capacity < MIN_TRIP_CAPACITY:
        errors.append(f"capacity: Capacity must be at least {MIN_TRIP_CAPACITY}")
    if capacity > MAX_TRIP_CAPACITY:
        errors.append(f"capacity: Capacity cannot exceed {MAX_TRIP_CAPACITY}")
    if available is not None:
        if not isinstance(available, int) or isinstance(available, bool):
            errors.append("available_capacity: Available capacity must be an integer")
        elif available < 0:
            errors.append("available_capacity: Available capacity cannot be negative")
        elif available > capacity:
            errors.append(
                "available_capacity: Available capacity cannot exceed total capacity",
            )
    return errors


def validate_timing(
    departure_time: Any, estimated_return_time: Any, now: datetime,
) -> list[str]:
    """Departure strictly in the future; return strictly after departure."""
    errors: list[str] = []
    if not isinstance(departure_time, datetime):
        errors.append("departure_time: Departure time is required")
    if not isinstance(estimated_return_time, datetime):
        errors.append("estimated_return_time: Estimated return time is required")
    if errors:
        return errors
    if departure_time.tzinfo is None or estimated_return_time.tzinfo is None:
        return ["departure_time: Times must be timezone-aware"]
    if departure_time <= now:
        errors.append("departure_time: Departure time must be in the future")
    if estimated_return_time <= departure_time:
        errors.append(
            "estimated_return_time: Estimated return time must be after departure time",
        )
    return errors


# ─── Location rules ──────────────────────────────────────────────

def validate_coordinates(latitude: Any, longitude: Any) -> list[str]:
    errors: list[str] = []
    if not is_number(latitude) or not -90 <= latitude <= 90:
        errors.append("coordinates.latitude: Latitude must be between -90 and 90")
    if not is_number(longitude) or not -180 <= longitude <= 180:
        errors.append("coordinates.longitude: Longitude must be between -180 and 180")
    return errors


def validate_address(address: Any, prefix: str = "address") -> list[str]:
    data = as_mapping(address)
    if data is None:
        return [f"{prefix}: Address is required"]
    errors = []
    for name in ADDRESS_FIELDS:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            label = name.replace("_", " ").capitalize()
            errors.append(f"{prefix}.{name}: {label} is required")
    return errors


# ─── Request rules ───────────────────────────────────────────────

def validate_items(items: Any) -> list[str]:
    """Non-empty list; each item named, quantity >= 1, prices >= 0."""
    if not isinstance(items, (list, tuple)) or not items:
        return ["items: At least one item is required"]
    errors: list[str] = []
    for index, raw in enumerate(items):
        prefix = f"items[{index}]"
        item = as_mapping(raw)
        if item is None:
            errors.append(f"{prefix}: Item must be an object")
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append(f"{prefix}.name: Name is required")
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            errors.append(f"{prefix}.quantity: Quantity must be at least 1")
        if not is_number(item.get("estimated_price")) or item["estimated_price"] < 0:
            errors.append(f"{prefix}.estimated_price: Estimated price cannot be negative")
        actual = item.get("actual_price")
        if actual is not None and (not is_number(actual) or actual < 0):
            errors.append(f"{prefix}.actual_price: Actual price cannot be negative")
        if item.get("image_url") is not None:
            errors.extend(validate_url(item["image_url"], f"{prefix}.image_url"))
    return errors


def items_estimated_total(items: Any) -> float | None:
    """Σ(estimated_price × quantity), or None when any item is malformed."""
    total = 0.0
    for raw in items or ():
        item = as_mapping(raw)
        if item is None:
            return None
        price, quantity = item.get("estimated_price"), item.get("quantity")
        if not is_number(price) or not is_number(quantity):
            return None
        total += price * quantity
    return round(total, 2)


def validate_pricing(items: Any, max_item_budget: Any, delivery_fee: Any) -> list[str]:
    """Budget and fee non-negative; items total within the item budget."""
    errors: list[str] = []
    if not is_number(max_item_budget) or max_item_budget < 0:
        errors.append("max_item_budget: Maximum item budget cannot be negative")
    if not is_number(delivery_fee) or delivery_fee < 0:
        errors.append("delivery_fee: Delivery fee cannot be negative")
    if errors:
        return errors
    total = items_estimated_total(items)
    if total is not None and total > round(max_item_budget, 2):
        errors.append(
            f"items: Items total ${total:.2f} exceeds maximum budget "
            f"${max_item_budget:.2f}",
        )
    return errors


# ─── Attachments ─────────────────────────────────────────────────

def validate_url(url: Any, field_name: str = "url") -> list[str]:
    if not isinstance(url, str) or not url.strip():
        return [f"{field_name}: URL is required"]
    try:
        _URL_ADAPTER.validate_python(url)
    except PydanticValidationError:
        return [f"{field_name}: '{url}' is not a valid URL"]
    return []
