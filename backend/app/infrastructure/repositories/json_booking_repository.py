"""Concrete repository implementation for DalaiLamaBooking backed by a JSON list file."""

import logging
from typing import Any

from app.application.interfaces import DalaiLamaBookingRepository
from app.domain.entities import BookingPage, BookingStats, BookingStatus, DalaiLamaBooking
from app.domain.exceptions import CorruptStoreError
from app.infrastructure.storage.json_list_store import (
    Document,
    JsonListStore,
    ListSchema,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

# Entity attribute → JSON key. The camelCase keys match files written by
# the previous Node deployment.
_FIELD_KEYS: dict[str, str] = {
    "customer_name": "customerName",
    "email": "email",
    "phone": "phone",
    "message": "message",
    "travelers": "travelers",
    "selected_date": "selectedDate",
    "total_amount": "totalAmount",
    "status": "status",
}


def build_booking_schema(code_prefix: str = "DL", code_width: int = 6) -> ListSchema:
    """ListSchema describing how bookings are laid out in the JSON file."""
    return ListSchema(
        code_prefix=code_prefix,
        code_width=code_width,
        code_field="bookingId",
        statuses=tuple(s.value for s in BookingStatus),
        initial_status=BookingStatus.PENDING.value,
        value_status=BookingStatus.CONFIRMED.value,
        amount_field="totalAmount",
        search_fields=("customerName", "email", "phone", "bookingId"),
    )


class JsonDalaiLamaBookingRepository(DalaiLamaBookingRepository):
    """Implements the DalaiLamaBookingRepository port on top of a JsonListStore."""

    def __init__(self, store: JsonListStore):
        self._store = store

    def _to_entity(self, document: Document) -> DalaiLamaBooking:
        """Map JSON document → domain entity."""
        try:
            record_id = document["id"]
            status = BookingStatus(document.get("status", BookingStatus.PENDING.value))
            created_at = parse_timestamp(document["createdAt"])
            updated_at = parse_timestamp(document["updatedAt"])
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptStoreError(
                self._store.path, f"unreadable booking {document.get('id')!r}: {exc}"
            ) from exc

        return DalaiLamaBooking(
            id=record_id,
            booking_id=document.get("bookingId"),
            customer_name=document.get("customerName", ""),
            email=document.get("email", ""),
            phone=document.get("phone", ""),
            message=document.get("message") or "",
            travelers=document.get("travelers", 0),
            selected_date=document.get("selectedDate", ""),
            total_amount=document.get("totalAmount"),
            status=status,
            created_at=created_at,
            updated_at=updated_at,
        )

    def _to_document(self, changes: dict[str, Any]) -> Document:
        """Map entity field names/values → JSON keys/values."""
        document: Document = {}
        for name, value in changes.items():
            key = _FIELD_KEYS.get(name)
            if key is None:
                raise ValueError(f"DalaiLamaBooking field '{name}' cannot be stored or changed")
            document[key] = value.value if isinstance(value, BookingStatus) else value
        return document

    async def create(self, booking: DalaiLamaBooking) -> DalaiLamaBooking:
        document = self._to_document({
            "customer_name": booking.customer_name,
            "email": booking.email,
            "phone": booking.phone,
            "message": booking.message,
            "travelers": booking.travelers,
            "selected_date": booking.selected_date,
            "total_amount": booking.total_amount,
        })
        stored = await self._store.create(document)
        return self._to_entity(stored)

    async def get_all(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> BookingPage:
        result = await self._store.find_all(
            status=status, search=search, page=page, limit=limit
        )
        return BookingPage(
            bookings=[self._to_entity(d) for d in result.records],
            total=result.total,
            pages=result.pages,
        )

    async def get_by_id(self, booking_id: str) -> DalaiLamaBooking | None:
        document = await self._store.find_by_id(booking_id)
        return self._to_entity(document) if document else None

    async def update(
        self, booking_id: str, changes: dict[str, Any]
    ) -> DalaiLamaBooking | None:
        document = await self._store.update(booking_id, self._to_document(changes))
        return self._to_entity(document) if document else None

    async def delete(self, booking_id: str) -> bool:
        return await self._store.delete(booking_id)

    async def count(self, status: BookingStatus | None = None) -> int:
        return await self._store.count(status.value if status else None)

    async def get_stats(self) -> BookingStats:
        stats = await self._store.stats()
        return BookingStats(
            total_bookings=stats.total,
            confirmed_bookings=stats.by_status.get(BookingStatus.CONFIRMED.value, 0),
            pending_bookings=stats.by_status.get(BookingStatus.PENDING.value, 0),
            cancelled_bookings=stats.by_status.get(BookingStatus.CANCELLED.value, 0),
            total_revenue=stats.total_value,
            avg_booking_value=stats.average_value,
        )
