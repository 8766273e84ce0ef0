"""Delivery Request Routes — create, accept and move requests over HTTP.

Invariants:
    - A request can only be attached to an announced trip with free capacity
    - Accepting reserves one trip slot; a full trip makes accept a 409
    - Cancelling an accepted request gives its slot back
    - Ranked requests list only pending ones, highest delivery fee first
    - Actual item prices are accepted only with the purchased status change
"""

from uuid import uuid4

from tests.factories import request_payload


async def _trip(client, trip_id):
    return (await client.get(f"/api/v1/trips/{trip_id}")).json()


async def test_create_request_returns_cost_summary(client, seed_trip):
    res = await client.post("/api/v1/requests", json=request_payload(seed_trip["id"]))
    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "pending"
    assert body["total_estimated_cost"] == 16.49
    assert body["total_actual_cost"] is None
    assert body["is_within_budget"] is True
    assert [i["name"] for i in body["items"]] == ["Milk", "Bread"]


async def test_create_request_over_budget_is_400(client, seed_trip):
    payload = request_payload(seed_trip["id"], max_item_budget=5.0)
    res = await client.post("/api/v1/requests", json=payload)
    assert res.status_code == 400
    assert res.json()["error"]["details"] == [
        "items: Items total $12.49 exceeds maximum budget $5.00",
    ]


async def test_create_request_on_unknown_trip_is_404(client):
    res = await client.post("/api/v1/requests", json=request_payload(uuid4()))
    assert res.status_code == 404


async def test_create_request_on_started_trip_is_409(client, seed_trip):
    await client.put(
        f"/api/v1/trips/{seed_trip['id']}/status", json={"status": "traveling"},
    )
    res = await client.post("/api/v1/requests", json=request_payload(seed_trip["id"]))
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "TRIP_NOT_ACCEPTING_REQUESTS"


async def test_accept_reserves_capacity(client, seed_trip, seed_request):
    res = await client.put(f"/api/v1/requests/{seed_request['id']}/accept")
    assert res.status_code == 200
    assert res.json()["status"] == "accepted"
    assert res.json()["accepted_at"] is not None
    assert (await _trip(client, seed_trip["id"]))["available_capacity"] == 1


async def test_double_accept_is_409(client, seed_trip, seed_request):
    await client.put(f"/api/v1/requests/{seed_request['id']}/accept")
    res = await client.put(f"/api/v1/requests/{seed_request['id']}/accept")
    assert res.status_code == 409
    assert (await _trip(client, seed_trip["id"]))["available_capacity"] == 1


async def test_accept_on_full_trip_is_409(client, seed_trip, seed_request):
    await client.put(
        f"/api/v1/trips/{seed_trip['id']}/capacity", json={"available_capacity": 0},
    )
    res = await client.put(f"/api/v1/requests/{seed_request['id']}/accept")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "CAPACITY_EXHAUSTED"

    res = await client.get(f"/api/v1/requests/{seed_request['id']}")
    assert res.json()["status"] == "pending"


async def test_cancel_accepted_request_releases_slot(client, seed_trip, seed_request):
    url = f"/api/v1/requests/{seed_request['id']}"
    await client.put(f"{url}/accept")
    res = await client.put(f"{url}/status", json={"status": "cancelled"})
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"
    assert (await _trip(client, seed_trip["id"]))["available_capacity"] == 2


async def test_delivery_flow_and_history(client, seed_request):
    url = f"/api/v1/requests/{seed_request['id']}"
    await client.put(f"{url}/accept")
    await client.put(f"{url}/status", json={"status": "purchased"})
    res = await client.put(f"{url}/status", json={"status": "delivered"})
    assert res.json()["completed_at"] is not None

    res = await client.put(f"{url}/status", json={"status": "cancelled"})
    assert res.status_code == 409

    res = await client.get(f"/api/v1/status/request/{seed_request['id']}/history")
    assert [u["status"] for u in res.json()["updates"]] == [
        "pending", "accepted", "purchased", "delivered",
    ]


async def test_ranked_requests(client, seed_trip):
    for fee in (2.0, 9.0, 5.0):
        await client.post(
            "/api/v1/requests", json=request_payload(seed_trip["id"], delivery_fee=fee),
        )
    res = await client.get(
        f"/api/v1/trips/{seed_trip['id']}/requests/ranked", params={"limit": 2},
    )
    assert res.status_code == 200
    assert [r["delivery_fee"] for r in res.json()] == [9.0, 5.0]


async def test_get_unknown_request_is_404(client):
    res = await client.get(f"/api/v1/requests/{uuid4()}")
    assert res.status_code == 404


async def test_purchase_records_actual_prices(client, seed_request):
    url = f"/api/v1/requests/{seed_request['id']}"
    await client.put(f"{url}/accept")
    milk, bread = seed_request["items"]
    res = await client.put(f"{url}/status", json={
        "status": "purchased",
        "actual_prices": {milk["id"]: 3.00, bread["id"]: 6.00},
    })
    assert res.status_code == 200
    body = res.json()
    assert [i["actual_price"] for i in body["items"]] == [3.00, 6.00]
    assert body["total_actual_cost"] == 16.00
    assert body["cost_difference"] == -0.49

    res = await client.get(url)
    assert res.json()["total_actual_cost"] == 16.00


async def test_actual_prices_outside_purchase_is_400(client, seed_request):
    url = f"/api/v1/requests/{seed_request['id']}"
    item_id = seed_request["items"][0]["id"]
    res = await client.put(f"{url}/status", json={
        "status": "accepted", "actual_prices": {item_id: 3.00},
    })
    assert res.status_code == 400
    body = (await client.get(url)).json()
    assert body["status"] == "pending"
    assert body["items"][0]["actual_price"] is None


async def test_actual_price_for_unknown_item_is_400(client, seed_request):
    url = f"/api/v1/requests/{seed_request['id']}"
    await client.put(f"{url}/accept")
    res = await client.put(f"{url}/status", json={
        "status": "purchased", "actual_prices": {str(uuid4()): 3.00},
    })
    assert res.status_code == 400
    assert (await client.get(url)).json()["status"] == "accepted"
