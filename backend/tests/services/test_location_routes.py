"""Location Routes — registration and geofenced check-in/check-out over HTTP.

Invariants:
    - Check-in outside the geofence is 409 and opens nothing
    - A second check-in without check-out is 409 (one active presence per user)
    - Check-out without an active presence is 404
    - current_user_count follows check-ins and check-outs
"""

from uuid import uuid4

from tests.factories import STORE_COORDS, location_payload

NEARBY = {"latitude": STORE_COORDS.latitude + 0.001, "longitude": STORE_COORDS.longitude}
FAR_AWAY = {"latitude": STORE_COORDS.latitude + 0.05, "longitude": STORE_COORDS.longitude}


async def test_create_location(client):
    res = await client.post("/api/v1/locations", json=location_payload())
    assert res.status_code == 201
    body = res.json()
    assert body["formatted_address"] == "1 Market St, Springfield, IL 62701"
    assert body["current_user_count"] == 0
    assert body["has_active_users"] is False


async def test_create_location_bad_coordinates_is_400(client):
    payload = location_payload(coordinates={"latitude": 95, "longitude": 0})
    res = await client.post("/api/v1/locations", json=payload)
    assert res.status_code == 400
    assert any(d.startswith("coordinates.latitude") for d in res.json()["error"]["details"])


async def test_get_unknown_location_is_404(client):
    res = await client.get(f"/api/v1/locations/{uuid4()}")
    assert res.status_code == 404


async def test_check_in_and_out(client, seed_location):
    url = f"/api/v1/locations/{seed_location['id']}"
    user_id = str(uuid4())

    res = await client.post(f"{url}/checkin", json={"user_id": user_id, "coordinates": NEARBY})
    assert res.status_code == 200
    assert res.json()["presence"]["is_active"] is True
    assert res.json()["location"]["current_user_count"] == 1

    res = await client.get(f"{url}/presence")
    assert [p["user_id"] for p in res.json()] == [user_id]

    res = await client.post(f"{url}/checkout", json={"user_id": user_id})
    assert res.status_code == 200
    assert res.json()["presence"]["is_active"] is False
    assert res.json()["location"]["current_user_count"] == 0


async def test_check_in_outside_geofence_is_409(client, seed_location):
    url = f"/api/v1/locations/{seed_location['id']}"
    res = await client.post(
        f"{url}/checkin", json={"user_id": str(uuid4()), "coordinates": FAR_AWAY},
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "GEOFENCE_FAILED"
    assert (await client.get(url)).json()["current_user_count"] == 0


async def test_double_check_in_is_409(client, seed_location):
    url = f"/api/v1/locations/{seed_location['id']}"
    body = {"user_id": str(uuid4()), "coordinates": NEARBY}
    await client.post(f"{url}/checkin", json=body)
    res = await client.post(f"{url}/checkin", json=body)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "ALREADY_CHECKED_IN"
    assert (await client.get(url)).json()["current_user_count"] == 1


async def test_check_out_without_check_in_is_404(client, seed_location):
    res = await client.post(
        f"/api/v1/locations/{seed_location['id']}/checkout",
        json={"user_id": str(uuid4())},
    )
    assert res.status_code == 404


async def test_check_in_again_after_check_out(client, seed_location):
    url = f"/api/v1/locations/{seed_location['id']}"
    body = {"user_id": str(uuid4()), "coordinates": NEARBY}
    await client.post(f"{url}/checkin", json=body)
    await client.post(f"{url}/checkout", json={"user_id": body["user_id"]})
    res = await client.post(f"{url}/checkin", json=body)
    assert res.status_code == 200
    assert res.json()["location"]["current_user_count"] == 1
