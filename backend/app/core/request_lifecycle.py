"""Request Lifecycle — delivery request creation, transitions, and cost aggregation.

Invariants:
    - PENDING -> ACCEPTED -> PURCHASED -> DELIVERED; CANCELLED only from PENDING or ACCEPTED
    - Σ(estimated_price × quantity) <= max_item_budget at creation
    - Budget checks cover the items portion only; the delivery fee is never part of it
    - total_actual_cost is None until EVERY item has an actual_price
    - Cost queries are pure; transitions validate before mutating

Design Decisions:
    - accept/mark_purchased/complete raise InvalidTransitionError out of order:
      a second accept must never reserve trip capacity twice
    - cancel_request is a no-op outside PENDING/ACCEPTED: cancelling an already
      cancelled or finished request is idempotent for callers
    - Amounts rounded to cents at query time, not stored rounded
"""

import uuid
from datetime import datetime
from typing import Any, Iterable, Mapping

from app.core.domain_types import RequestStatus
from app.core.entities import Address, DeliveryRequest, RequestItem, utc_now
from app.core.errors import InvalidTransitionError, ValidationError
from app.core import validation


REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.ACCEPTED, RequestStatus.CANCELLED}),
    RequestStatus.ACCEPTED: frozenset({RequestStatus.PURCHASED, RequestStatus.CANCELLED}),
    RequestStatus.PURCHASED: frozenset({RequestStatus.DELIVERED}),
    RequestStatus.DELIVERED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

CANCELLABLE_REQUEST_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.ACCEPTED})

DEFAULT_RANKING_LIMIT: int = 10


# ─── Creation ────────────────────────────────────────────────────

def validate_request_data(data: Mapping[str, Any]) -> list[str]:
    """Collect every violated creation rule."""
    errors: list[str] = []
    if not isinstance(data.get("trip_id"), uuid.UUID):
        errors.append("trip_id: Trip ID is required")
    if not isinstance(data.get("requester_id"), uuid.UUID):
        errors.append("requester_id: Requester ID is required")
    items = data.get("items")
    item_errors = validation.validate_items(items)
    errors.extend(item_errors)
    errors.extend(validation.validate_address(
        data.get("delivery_address"), "delivery_address",
    ))
    pricing_items = items if not item_errors else None
    errors.extend(validation.validate_pricing(
        pricing_items, data.get("max_item_budget"), data.get("delivery_fee"),
    ))
    return errors


def _build_item(raw: Any) -> RequestItem:
    if isinstance(raw, RequestItem):
        return RequestItem(**vars(raw))
    return RequestItem(
        name=raw["name"].strip(),
        quantity=raw["quantity"],
        estimated_price=float(raw["estimated_price"]),
        description=raw.get("description"),
        actual_price=(
            float(raw["actual_price"]) if raw.get("actual_price") is not None else None
        ),
        image_url=raw.get("image_url"),
        id=raw.get("id") or uuid.uuid4(),
    )


def _build_address(raw: Any) -> Address:
    data = validation.as_mapping(raw)
    return Address(**{name: data[name].strip() for name in validation.ADDRESS_FIELDS})


def create_request(data: Mapping[str, Any], now: datetime | None = None) -> DeliveryRequest:
    """Build a new PENDING request; raises ValidationError listing every violation."""
    errors = validate_request_data(data)
    if errors:
        raise ValidationError(errors)
    return DeliveryRequest(
        trip_id=data["trip_id"],
        requester_id=data["requester_id"],
        items=[_build_item(raw) for raw in data["items"]],
        delivery_address=_build_address(data["delivery_address"]),
        max_item_budget=float(data["max_item_budget"]),
        delivery_fee=float(data["delivery_fee"]),
        special_instructions=data.get("special_instructions"),
        status=RequestStatus.PENDING,
        created_at=now or utc_now(),
    )


# ─── Status transitions ──────────────────────────────────────────

def can_transition_request(current: RequestStatus, new_status: RequestStatus) -> bool:
    return new_status in REQUEST_TRANSITIONS[current]


def _require(request: DeliveryRequest, new_status: RequestStatus) -> None:
    if not can_transition_request(request.status, new_status):
        raise InvalidTransitionError(
            "request", request.status.value, new_status.value,
        )


def can_be_accepted(request: DeliveryRequest) -> bool:
    return request.status == RequestStatus.PENDING


def accept_request(request: DeliveryRequest, now: datetime | None = None) -> DeliveryRequest:
    _require(request, RequestStatus.ACCEPTED)
    request.status = RequestStatus.ACCEPTED
    request.accepted_at = now or utc_now()
    return request


def mark_purchased(request: DeliveryRequest) -> DeliveryRequest:
    _require(request, RequestStatus.PURCHASED)
    request.status = RequestStatus.PURCHASED
    return request


def complete_request(request: DeliveryRequest, now: datetime | None = None) -> DeliveryRequest:
    _require(request, RequestStatus.DELIVERED)
    request.status = RequestStatus.DELIVERED
    request.completed_at = now or utc_now()
    return request


def cancel_request(request: DeliveryRequest) -> DeliveryRequest:
    """PENDING/ACCEPTED -> CANCELLED; unchanged from any other status."""
    if request.status in CANCELLABLE_REQUEST_STATUSES:
        request.status = RequestStatus.CANCELLED
    return request


def update_request_status(
    request: DeliveryRequest, new_status: RequestStatus, now: datetime | None = None,
) -> DeliveryRequest:
    """Generic entry point used by PUT /requests/{id}/status."""
    if new_status == RequestStatus.CANCELLED:
        _require(request, RequestStatus.CANCELLED)
        return cancel_request(request)
    if new_status == RequestStatus.ACCEPTED:
        return accept_request(request, now)
    if new_status == RequestStatus.PURCHASED:
        return mark_purchased(request)
    if new_status == RequestStatus.DELIVERED:
        return complete_request(request, now)
    raise InvalidTransitionError("request", request.status.value, new_status.value)


def is_completed(request: DeliveryRequest) -> bool:
    return request.status == RequestStatus.DELIVERED


# ─── Actual prices ───────────────────────────────────────────────

def record_actual_prices(
    request: DeliveryRequest, prices: Mapping[uuid.UUID, float],
) -> DeliveryRequest:
    """Set actual_price per item id after purchase."""
    known = {item.id for item in request.items}
    errors = [
        f"prices: Unknown item '{item_id}'" for item_id in prices if item_id not in known
    ]
    errors.extend(
        f"prices[{item_id}]: Actual price cannot be negative"
        for item_id, price in prices.items()
        if not validation.is_number(price) or price < 0
    )
    if errors:
        raise ValidationError(errors)
    for item in request.items:
        if item.id in prices:
            item.actual_price = float(prices[item.id])
    return request


# ─── Cost queries ────────────────────────────────────────────────

def items_estimated_cost(request: DeliveryRequest) -> float:
    return round(sum(i.estimated_price * i.quantity for i in request.items), 2)


def items_actual_cost(request: DeliveryRequest) -> float | None:
    if any(item.actual_price is None for item in request.items):
        return None
    return round(sum(i.actual_price * i.quantity for i in request.items), 2)


def total_estimated_cost(request: DeliveryRequest) -> float:
    return round(items_estimated_cost(request) + request.delivery_fee, 2)


def total_actual_cost(request: DeliveryRequest) -> float | None:
    items_cost = items_actual_cost(request)
    if items_cost is None:
        return None
    return round(items_cost + request.delivery_fee, 2)


def cost_difference(request: DeliveryRequest) -> float | None:
    actual = total_actual_cost(request)
    if actual is None:
        return None
    return round(actual - total_estimated_cost(request), 2)


def is_within_budget(request: DeliveryRequest) -> bool:
    """Items-only spend (actual when known, else estimated) against max_item_budget."""
    spent = items_actual_cost(request)
    if spent is None:
        spent = items_estimated_cost(request)
    return spent <= round(request.max_item_budget, 2)


def cost_summary(request: DeliveryRequest) -> dict:
    return {
        "total_estimated_cost": total_estimated_cost(request),
        "total_actual_cost": total_actual_cost(request),
        "cost_difference": cost_difference(request),
        "is_within_budget": is_within_budget(request),
    }


# ─── Matching ────────────────────────────────────────────────────

def rank_requests_for_trip(
    requests: Iterable[DeliveryRequest], limit: int = DEFAULT_RANKING_LIMIT,
) -> list[DeliveryRequest]:
    """Pending requests, highest delivery fee first, then oldest first."""
    pending = [r for r in requests if r.status == RequestStatus.PENDING]
    pending.sort(key=lambda r: (-r.delivery_fee, r.created_at))
    return pending[:max(limit, 0)]
