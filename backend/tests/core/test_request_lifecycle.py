"""Request Lifecycle — tests for creation, transitions, costs and ranking.

Tests cover:
    - create_request defaults and collected validation errors (budget message)
    - accept/mark_purchased/complete ordering, double accept rejected
    - cancel_request from PENDING/ACCEPTED, no-op elsewhere
    - update_request_status dispatch and illegal cancels
    - cost queries (estimated, actual, difference, items-only budget)
    - record_actual_prices validation
    - rank_requests_for_trip ordering and limit
"""

import uuid
from datetime import timedelta

import pytest

from app.core.domain_types import RequestStatus
from app.core.errors import ConflictError, InvalidTransitionError, ValidationError
from app.core.request_lifecycle import (
    accept_request, cancel_request, complete_request, cost_difference,
    create_request, is_completed, is_within_budget, mark_purchased,
    rank_requests_for_trip, record_actual_prices, total_actual_cost,
    total_estimated_cost, update_request_status,
)
from tests.factories import NOW, make_request, request_data

LATER = NOW + timedelta(minutes=10)


def _price_all(request, *prices):
    return record_actual_prices(
        request, {item.id: price for item, price in zip(request.items, prices)},
    )


# ─── create_request ──────────────────────────────────────────────

def test_create_request_defaults():
    request = make_request()
    assert request.status == RequestStatus.PENDING
    assert request.created_at == NOW
    assert request.accepted_at is None
    assert [i.name for i in request.items] == ["Milk", "Bread"]
    assert request.delivery_address.zip_code == "62704"


def test_items_over_budget_rejected():
    with pytest.raises(ValidationError) as exc:
        create_request(request_data(max_item_budget=5.0), now=NOW)
    assert exc.value.errors == [
        "items: Items total $12.49 exceeds maximum budget $5.00",
    ]


def test_delivery_fee_is_not_part_of_item_budget():
    # items 12.49 + fee 4.00 > 15.00, items alone fit
    request = make_request(max_item_budget=12.49, delivery_fee=4.0)
    assert request.max_item_budget == 12.49


def test_create_request_collects_every_violation():
    data = request_data(
        items=[], delivery_fee=-1,
        delivery_address={"street": "9 Elm St"},
    )
    with pytest.raises(ValidationError) as exc:
        create_request(data, now=NOW)
    errors = exc.value.errors
    assert "items: At least one item is required" in errors
    assert "delivery_fee: Delivery fee cannot be negative" in errors
    assert "delivery_address.city: City is required" in errors


def test_invalid_request_is_400():
    with pytest.raises(ValidationError) as exc:
        create_request(request_data(items=None), now=NOW)
    assert exc.value.http_status == 400


# ─── transitions ─────────────────────────────────────────────────

def test_full_delivery_flow():
    request = make_request()
    accept_request(request, now=NOW)
    assert request.status == RequestStatus.ACCEPTED
    assert request.accepted_at == NOW
    mark_purchased(request)
    assert request.status == RequestStatus.PURCHASED
    complete_request(request, now=LATER)
    assert request.status == RequestStatus.DELIVERED
    assert request.completed_at == LATER
    assert is_completed(request)


def test_second_accept_rejected():
    request = make_request()
    accept_request(request, now=NOW)
    with pytest.raises(InvalidTransitionError):
        accept_request(request, now=LATER)
    assert request.accepted_at == NOW


def test_purchase_requires_accepted():
    request = make_request()
    with pytest.raises(ConflictError):
        mark_purchased(request)
    assert request.status == RequestStatus.PENDING


def test_complete_requires_purchased():
    request = make_request()
    accept_request(request, now=NOW)
    with pytest.raises(InvalidTransitionError):
        complete_request(request, now=LATER)
    assert request.completed_at is None


def test_cancel_from_pending_and_accepted():
    pending = make_request()
    assert cancel_request(pending).status == RequestStatus.CANCELLED
    accepted = make_request()
    accept_request(accepted, now=NOW)
    assert cancel_request(accepted).status == RequestStatus.CANCELLED


def test_cancel_after_purchase_is_a_no_op():
    request = make_request()
    accept_request(request, now=NOW)
    mark_purchased(request)
    assert cancel_request(request).status == RequestStatus.PURCHASED


def test_update_status_rejects_cancel_after_purchase():
    request = make_request()
    accept_request(request, now=NOW)
    mark_purchased(request)
    with pytest.raises(InvalidTransitionError):
        update_request_status(request, RequestStatus.CANCELLED)


def test_update_status_dispatches_accept():
    request = make_request()
    update_request_status(request, RequestStatus.ACCEPTED, now=LATER)
    assert request.accepted_at == LATER


def test_update_status_to_pending_rejected():
    request = make_request()
    with pytest.raises(InvalidTransitionError):
        update_request_status(request, RequestStatus.PENDING)


# ─── costs ───────────────────────────────────────────────────────

def test_total_estimated_cost_includes_fee():
    assert total_estimated_cost(make_request()) == 16.49


def test_actual_cost_undefined_until_every_item_priced():
    request = make_request()
    record_actual_prices(request, {request.items[0].id: 3.00})
    assert total_actual_cost(request) is None
    assert cost_difference(request) is None


def test_actual_cost_and_difference():
    request = _price_all(make_request(), 3.00, 6.00)
    assert total_actual_cost(request) == 16.00
    assert cost_difference(request) == -0.49


@pytest.mark.parametrize("eggs,butter,fee,total", [
    (5.49, 2.99, 3.00, 16.97),
    (5.49, 2.99, 0.00, 13.97),
    (5.00, 3.50, 3.00, 16.50),
])
def test_actual_cost_sums_quantity_times_price_plus_fee(eggs, butter, fee, total):
    request = make_request(
        items=[
            {"name": "Eggs", "quantity": 2, "estimated_price": 5.49},
            {"name": "Butter", "quantity": 1, "estimated_price": 2.99},
        ],
        delivery_fee=fee,
    )
    _price_all(request, eggs, butter)
    assert total_actual_cost(request) == total


def test_within_budget_uses_estimate_without_actuals():
    assert is_within_budget(make_request())


def test_over_budget_when_actuals_exceed():
    request = _price_all(make_request(), 6.00, 6.00)
    assert not is_within_budget(request)


def test_record_actual_prices_rejects_unknown_and_negative():
    request = make_request()
    stranger = uuid.uuid4()
    with pytest.raises(ValidationError) as exc:
        record_actual_prices(request, {stranger: 1.0, request.items[0].id: -2})
    assert len(exc.value.errors) == 2
    assert request.items[0].actual_price is None


# ─── ranking ─────────────────────────────────────────────────────

def test_rank_orders_by_fee_then_age_and_skips_non_pending():
    trip_id = uuid.uuid4()
    low = make_request(now=NOW, trip_id=trip_id, delivery_fee=2.0)
    high_new = make_request(now=LATER, trip_id=trip_id, delivery_fee=8.0)
    high_old = make_request(now=NOW, trip_id=trip_id, delivery_fee=8.0)
    taken = make_request(now=NOW, trip_id=trip_id, delivery_fee=20.0)
    accept_request(taken, now=NOW)

    ranked = rank_requests_for_trip([low, high_new, taken, high_old])
    assert ranked == [high_old, high_new, low]


def test_rank_respects_limit():
    requests = [make_request(delivery_fee=float(i)) for i in range(5)]
    assert len(rank_requests_for_trip(requests, limit=2)) == 2
