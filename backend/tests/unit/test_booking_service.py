"""Unit tests for the DalaiLamaBookingService."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import ValidationError

from app.application.interfaces import DalaiLamaBookingRepository
from app.application.schemas import BookingCreate, BookingUpdate
from app.application.services import DalaiLamaBookingService
from app.domain.entities import BookingPage, BookingStats, BookingStatus, DalaiLamaBooking
from app.domain.exceptions import EntityNotFoundError


class FakeBookingRepository(DalaiLamaBookingRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self):
        self._bookings: dict[str, DalaiLamaBooking] = {}
        self._next = 1
        self.last_query: dict[str, Any] = {}

    async def create(self, booking: DalaiLamaBooking) -> DalaiLamaBooking:
        now = datetime.now(timezone.utc)
        stored = replace(
            booking,
            id=f"id-{self._next}",
            booking_id=f"DL{self._next:06d}",
            created_at=now,
            updated_at=now,
        )
        self._next += 1
        self._bookings[stored.id] = stored
        return stored

    async def get_all(self, *, status=None, search=None, page=1, limit=10) -> BookingPage:
        self.last_query = {"status": status, "search": search, "page": page, "limit": limit}
        bookings = list(self._bookings.values())
        return BookingPage(bookings=bookings[(page - 1) * limit : page * limit], total=len(bookings), pages=1)

    async def get_by_id(self, booking_id: str) -> DalaiLamaBooking | None:
        return self._bookings.get(booking_id)

    async def update(self, booking_id: str, changes: dict[str, Any]) -> DalaiLamaBooking | None:
        if booking_id not in self._bookings:
            return None
        updated = replace(self._bookings[booking_id], **changes)
        self._bookings[booking_id] = updated
        return updated

    async def delete(self, booking_id: str) -> bool:
        return self._bookings.pop(booking_id, None) is not None

    async def count(self, status: BookingStatus | None = None) -> int:
        return sum(1 for b in self._bookings.values() if status is None or b.status == status)

    async def get_stats(self) -> BookingStats:
        return BookingStats(
            total_bookings=len(self._bookings),
            confirmed_bookings=0,
            pending_bookings=len(self._bookings),
            cancelled_bookings=0,
            total_revenue=0,
            avg_booking_value=0,
        )


def _create_payload(**overrides) -> BookingCreate:
    data = {
        "customerName": "  Tenzin Dorje ",
        "email": "tenzin@example.com",
        "phone": "9816000000",
        "travelers": 2,
        "selectedDate": "2026-11-14",
        "totalAmount": 4500,
    }
    data.update(overrides)
    return BookingCreate(**data)


@pytest.fixture
def repo() -> FakeBookingRepository:
    return FakeBookingRepository()


@pytest.fixture
def service(repo: FakeBookingRepository) -> DalaiLamaBookingService:
    return DalaiLamaBookingService(repo)


@pytest.mark.asyncio
async def test_create_booking(service: DalaiLamaBookingService):
    booking = await service.create_booking(_create_payload())
    assert booking.id is not None
    assert booking.booking_id == "DL000001"
    assert booking.customer_name == "Tenzin Dorje"
    assert booking.message == ""
    assert booking.status is BookingStatus.PENDING


@pytest.mark.asyncio
async def test_get_booking_not_found(service: DalaiLamaBookingService):
    with pytest.raises(EntityNotFoundError):
        await service.get_booking("missing")


@pytest.mark.asyncio
async def test_list_bookings_passes_filters(service: DalaiLamaBookingService, repo: FakeBookingRepository):
    await service.create_booking(_create_payload())
    page = await service.list_bookings(status="Pending", search="  tenzin ", page=1, limit=5)
    assert page.total == 1
    assert repo.last_query == {"status": "Pending", "search": "tenzin", "page": 1, "limit": 5}


@pytest.mark.asyncio
async def test_update_booking_only_touches_supplied_fields(service: DalaiLamaBookingService):
    created = await service.create_booking(_create_payload())
    updated = await service.update_booking(created.id, BookingUpdate(status=BookingStatus.CONFIRMED))
    assert updated.status is BookingStatus.CONFIRMED
    assert updated.total_amount == 4500
    assert updated.customer_name == created.customer_name


@pytest.mark.asyncio
async def test_update_booking_allows_any_transition(service: DalaiLamaBookingService):
    created = await service.create_booking(_create_payload())
    await service.update_booking(created.id, BookingUpdate(status=BookingStatus.CANCELLED))
    revived = await service.update_booking(created.id, BookingUpdate(status=BookingStatus.CONFIRMED))
    assert revived.status is BookingStatus.CONFIRMED


@pytest.mark.asyncio
async def test_update_booking_not_found(service: DalaiLamaBookingService):
    with pytest.raises(EntityNotFoundError):
        await service.update_booking("missing", BookingUpdate(status=BookingStatus.CONFIRMED))


@pytest.mark.asyncio
async def test_delete_booking(service: DalaiLamaBookingService):
    created = await service.create_booking(_create_payload())
    assert await service.delete_booking(created.id) is True
    with pytest.raises(EntityNotFoundError):
        await service.get_booking(created.id)
    with pytest.raises(EntityNotFoundError):
        await service.delete_booking(created.id)


@pytest.mark.asyncio
async def test_count_bookings(service: DalaiLamaBookingService):
    await service.create_booking(_create_payload())
    await service.create_booking(_create_payload())
    assert await service.count_bookings() == 2
    assert await service.count_bookings(BookingStatus.CONFIRMED) == 0


# ── Schema validation ────────────────────────────────────────────────

def test_create_schema_rejects_bad_email():
    with pytest.raises(ValidationError):
        _create_payload(email="not-an-email")


def test_create_schema_requires_amount():
    data = _create_payload().model_dump(by_alias=True)
    del data["totalAmount"]
    with pytest.raises(ValidationError):
        BookingCreate(**data)


def test_create_schema_accepts_snake_case_names():
    payload = BookingCreate(
        customer_name="Pema",
        email="pema@example.com",
        phone="1",
        travelers=1,
        selected_date="2026-12-01",
        total_amount=0,
    )
    assert payload.customer_name == "Pema"


def test_update_schema_requires_a_field():
    with pytest.raises(ValidationError):
        BookingUpdate()


def test_update_schema_rejects_unknown_status():
    with pytest.raises(ValidationError):
        BookingUpdate(status="Archived")


@pytest.mark.parametrize("amount", [float("inf"), float("nan")])
def test_schemas_reject_non_finite_amounts(amount: float):
    with pytest.raises(ValidationError):
        _create_payload(totalAmount=amount)
    with pytest.raises(ValidationError):
        BookingUpdate(total_amount=amount)
