"""Tests for the Dalai Lama booking endpoints, backed by a temporary bookings file."""

import json
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.infrastructure.dependencies import get_booking_store
from app.infrastructure.repositories import build_booking_schema
from app.infrastructure.storage.json_list_store import JsonListStore
from app.main import app

BASE = "/api/v1/dalai-lama-bookings"


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "dalai-lama-bookings.json"


@pytest_asyncio.fixture
async def client(store_path) -> AsyncIterator[AsyncClient]:
    store = JsonListStore(store_path, build_booking_schema())
    app.dependency_overrides[get_booking_store] = lambda: store
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_booking_store, None)


def _payload(name: str = "Tenzin Dorje", amount: float = 4500, **overrides) -> dict:
    data = {
        "customerName": name,
        "email": "tenzin@example.com",
        "phone": "+91 98160 00000",
        "message": "Two seats near the front",
        "travelers": 2,
        "selectedDate": "2026-11-14",
        "totalAmount": amount,
    }
    data.update(overrides)
    return data


async def _create(client: AsyncClient, **kwargs) -> dict:
    response = await client.post(BASE, json=_payload(**kwargs))
    assert response.status_code == 201
    return response.json()["booking"]


@pytest.mark.asyncio
async def test_create_booking_returns_201(client: AsyncClient):
    response = await client.post(BASE, json=_payload())

    assert response.status_code == 201
    body = response.json()
    assert "submitted successfully" in body["message"]
    booking = body["booking"]
    assert booking["bookingId"] == "DL000001"
    assert booking["status"] == "Pending"
    assert booking["customerName"] == "Tenzin Dorje"
    assert booking["totalAmount"] == 4500


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "nope"},
        {"travelers": 0},
        {"customerName": ""},
        {"totalAmount": None},
    ],
)
async def test_create_booking_validation(client: AsyncClient, overrides: dict):
    response = await client.post(BASE, json=_payload(**overrides))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_booking_rejects_non_finite_amount(client: AsyncClient, store_path):
    body = json.dumps(_payload()).replace("4500", "1e999")

    response = await client.post(BASE, content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 422
    assert not store_path.exists()
    stats = await client.get(f"{BASE}/admin/stats")
    assert stats.status_code == 200


@pytest.mark.asyncio
async def test_update_booking_rejects_non_finite_amount(client: AsyncClient):
    created = await _create(client)

    response = await client.patch(
        f"{BASE}/{created['id']}",
        content='{"totalAmount": 1e999}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert (await client.get(f"{BASE}/{created['id']}")).json()["totalAmount"] == 4500


@pytest.mark.asyncio
async def test_list_bookings_envelope_and_pagination(client: AsyncClient):
    for i in range(3):
        await _create(client, name=f"Guest {i}")

    response = await client.get(BASE, params={"page": 2, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["results"] == 1
    assert len(body["bookings"]) == 1
    assert body["pagination"] == {"total": 3, "page": 2, "pages": 2}


@pytest.mark.asyncio
async def test_list_bookings_filters(client: AsyncClient):
    first = await _create(client, name="Pema Lhamo")
    await _create(client, name="Karma")
    await client.patch(f"{BASE}/{first['id']}", json={"status": "Confirmed"})

    confirmed = (await client.get(BASE, params={"status": "Confirmed"})).json()
    assert [b["id"] for b in confirmed["bookings"]] == [first["id"]]

    everything = (await client.get(BASE, params={"status": "All"})).json()
    assert everything["pagination"]["total"] == 2

    searched = (await client.get(BASE, params={"search": "karma"})).json()
    assert [b["customerName"] for b in searched["bookings"]] == ["Karma"]


@pytest.mark.asyncio
async def test_list_bookings_rejects_bad_page(client: AsyncClient):
    response = await client.get(BASE, params={"page": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_booking_and_404(client: AsyncClient):
    created = await _create(client)

    response = await client.get(f"{BASE}/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created

    missing = await client.get(f"{BASE}/does-not-exist")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_update_booking(client: AsyncClient):
    created = await _create(client)

    response = await client.patch(f"{BASE}/{created['id']}", json={"status": "Cancelled"})

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "Cancelled"
    assert updated["bookingId"] == created["bookingId"]
    assert updated["customerName"] == created["customerName"]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"status": "Archived"}])
async def test_update_booking_validation(client: AsyncClient, body: dict):
    created = await _create(client)
    response = await client.patch(f"{BASE}/{created['id']}", json=body)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_missing_booking_returns_404(client: AsyncClient):
    response = await client.patch(f"{BASE}/does-not-exist", json={"status": "Confirmed"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_booking(client: AsyncClient):
    created = await _create(client)

    response = await client.delete(f"{BASE}/{created['id']}")
    assert response.status_code == 204

    again = await client.delete(f"{BASE}/{created['id']}")
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_stats_route_is_not_captured_by_booking_id(client: AsyncClient):
    first = await _create(client, amount=100)
    await _create(client, amount=200)
    await _create(client, amount=300)
    await client.patch(f"{BASE}/{first['id']}", json={"status": "Confirmed"})

    response = await client.get(f"{BASE}/admin/stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalBookings": 3,
        "confirmedBookings": 1,
        "pendingBookings": 2,
        "cancelledBookings": 0,
        "totalRevenue": 100,
        "avgBookingValue": 200,
    }


@pytest.mark.asyncio
async def test_count_route(client: AsyncClient):
    await _create(client)
    await _create(client)

    assert (await client.get(f"{BASE}/admin/count")).json() == {"count": 2}
    assert (await client.get(f"{BASE}/admin/count", params={"status": "Confirmed"})).json() == {"count": 0}


@pytest.mark.asyncio
async def test_corrupt_store_returns_500(client: AsyncClient, store_path):
    store_path.write_text("{broken", encoding="utf-8")

    response = await client.get(BASE)

    assert response.status_code == 500
    assert response.json()["detail"] == "Booking storage is unavailable"
    assert store_path.read_text(encoding="utf-8") == "{broken"
