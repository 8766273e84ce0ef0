"""Status Tracker — tests for the append-only status log.

Tests cover:
    - record() produces frozen StatusUpdate values in timestamp order
    - pagination bounds (limit 1..100, offset >= 0)
    - entity_type restricted to trip/request; status restricted to that entity's enum
    - photo/receipt confirmations: URL validation, metadata tag, default status
    - notification intent flags
"""

import dataclasses
import uuid
from datetime import timedelta

import pytest

from app.core.domain_types import EntityType, RequestStatus, TripStatus
from app.core.entities import StatusTrackingOptions
from app.core.errors import NotFoundError, ValidationError
from app.core.status_tracker import StatusTracker, build_status_update
from tests.factories import NOW


class _Clock:
    """Advances one second per call."""

    def __init__(self):
        self.now = NOW

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def tracker():
    return StatusTracker(clock=_Clock())


# ─── record / history ────────────────────────────────────────────

def test_record_is_immutable(tracker):
    update = tracker.record(EntityType.TRIP, uuid.uuid4(), TripStatus.ANNOUNCED)
    assert update.status == "announced"
    with pytest.raises(dataclasses.FrozenInstanceError):
        update.status = "traveling"


def test_history_is_ascending(tracker):
    trip_id = uuid.uuid4()
    for status in (TripStatus.ANNOUNCED, TripStatus.TRAVELING, TripStatus.AT_DESTINATION):
        tracker.record("trip", trip_id, status)
    history = tracker.get_status_history("trip", trip_id)
    assert [u.status for u in history] == ["announced", "traveling", "at_destination"]
    assert history[0].timestamp < history[-1].timestamp


def test_history_pagination(tracker):
    request_id = uuid.uuid4()
    for status in RequestStatus:
        tracker.record(EntityType.REQUEST, request_id, status)
    page = tracker.get_status_history(EntityType.REQUEST, request_id, limit=2, offset=1)
    assert [u.status for u in page] == ["accepted", "purchased"]


def test_history_is_scoped_per_entity(tracker):
    trip_id = uuid.uuid4()
    tracker.record(EntityType.TRIP, trip_id, TripStatus.ANNOUNCED)
    tracker.record(EntityType.REQUEST, trip_id, RequestStatus.PENDING)
    assert len(tracker.get_status_history(EntityType.TRIP, trip_id)) == 1


@pytest.mark.parametrize("limit,offset", [(0, 0), (101, 0), (10, -1)])
def test_history_page_bounds(tracker, limit, offset):
    with pytest.raises(ValidationError):
        tracker.get_status_history(EntityType.TRIP, uuid.uuid4(), limit, offset)


def test_unknown_entity_type_rejected(tracker):
    with pytest.raises(ValidationError) as exc:
        tracker.record("payment", uuid.uuid4(), "paid")
    assert exc.value.errors == [
        "entity_type: 'payment' is not one of trip, request",
    ]


@pytest.mark.parametrize("entity_type,status", [
    (EntityType.TRIP, "banana"),
    (EntityType.TRIP, RequestStatus.PURCHASED),
    (EntityType.REQUEST, TripStatus.TRAVELING),
])
def test_status_must_belong_to_entity(tracker, entity_type, status):
    entity_id = uuid.uuid4()
    with pytest.raises(ValidationError):
        tracker.record(entity_type, entity_id, status)
    assert tracker.get_latest_status(entity_type, entity_id) is None


def test_latest_prefers_last_append_on_equal_timestamps():
    tracker = StatusTracker(clock=lambda: NOW)
    trip_id = uuid.uuid4()
    tracker.record(EntityType.TRIP, trip_id, TripStatus.ANNOUNCED)
    tracker.record(EntityType.TRIP, trip_id, TripStatus.TRAVELING)
    assert tracker.get_latest_status(EntityType.TRIP, trip_id).status == "traveling"
    history = tracker.get_status_history(EntityType.TRIP, trip_id)
    assert [u.status for u in history] == ["announced", "traveling"]


def test_latest_status(tracker):
    trip_id = uuid.uuid4()
    assert tracker.get_latest_status(EntityType.TRIP, trip_id) is None
    tracker.record(EntityType.TRIP, trip_id, TripStatus.ANNOUNCED)
    tracker.record(EntityType.TRIP, trip_id, TripStatus.TRAVELING)
    assert tracker.get_latest_status(EntityType.TRIP, trip_id).status == "traveling"


# ─── confirmations ───────────────────────────────────────────────

def test_photo_confirmation_restates_latest_status(tracker):
    request_id = uuid.uuid4()
    tracker.record(EntityType.REQUEST, request_id, RequestStatus.PURCHASED)
    update = tracker.add_photo_confirmation(
        EntityType.REQUEST, request_id, "https://cdn.example.com/p/1.jpg",
        metadata={"note": "bagged"},
    )
    assert update.status == "purchased"
    assert update.photo_url == "https://cdn.example.com/p/1.jpg"
    assert update.receipt_url is None
    assert update.metadata == {"note": "bagged", "confirmation_type": "photo"}


def test_receipt_confirmation_with_explicit_status(tracker):
    request_id = uuid.uuid4()
    update = tracker.add_receipt_confirmation(
        "request", request_id, "https://cdn.example.com/r/1.png",
        status=RequestStatus.DELIVERED,
    )
    assert update.status == "delivered"
    assert update.metadata["confirmation_type"] == "receipt"


def test_confirmation_with_foreign_status_appends_nothing(tracker):
    trip_id = uuid.uuid4()
    tracker.record(EntityType.TRIP, trip_id, TripStatus.ANNOUNCED)
    with pytest.raises(ValidationError):
        tracker.add_receipt_confirmation(
            EntityType.TRIP, trip_id, "https://cdn.example.com/r.png", status="banana",
        )
    assert tracker.get_latest_status(EntityType.TRIP, trip_id).status == "announced"


def test_confirmation_with_bad_url_appends_nothing(tracker):
    trip_id = uuid.uuid4()
    tracker.record(EntityType.TRIP, trip_id, TripStatus.ANNOUNCED)
    with pytest.raises(ValidationError):
        tracker.add_photo_confirmation(EntityType.TRIP, trip_id, "not-a-url")
    assert len(tracker.get_status_history(EntityType.TRIP, trip_id)) == 1


def test_confirmation_without_history_is_not_found(tracker):
    with pytest.raises(NotFoundError):
        tracker.add_receipt_confirmation(
            EntityType.TRIP, uuid.uuid4(), "https://cdn.example.com/r.png",
        )


# ─── notification intent ─────────────────────────────────────────

def test_options_default_to_notify():
    update = build_status_update(EntityType.TRIP, uuid.uuid4(), "announced", now=NOW)
    assert update.should_notify
    assert update.timestamp == NOW


def test_silent_update():
    options = StatusTrackingOptions(notify_users=False, send_real_time_updates=False)
    update = build_status_update(
        EntityType.TRIP, uuid.uuid4(), TripStatus.TRAVELING, options, now=NOW,
    )
    assert not update.should_notify


def test_blank_status_rejected():
    with pytest.raises(ValidationError):
        build_status_update(EntityType.TRIP, uuid.uuid4(), "", now=NOW)
