"""Application service (use case) for Dalai Lama booking operations."""

import logging

from app.application.interfaces import DalaiLamaBookingRepository
from app.application.schemas.booking import BookingCreate, BookingUpdate
from app.domain.entities import BookingPage, BookingStats, BookingStatus, DalaiLamaBooking
from app.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

_ENTITY = "DalaiLamaBooking"


class DalaiLamaBookingService:
    """Orchestrates booking CRUD logic. Depends on the repository port (DI)."""

    def __init__(self, repository: DalaiLamaBookingRepository):
        self._repository = repository

    async def get_booking(self, booking_id: str) -> DalaiLamaBooking:
        booking = await self._repository.get_by_id(booking_id)
        if booking is None:
            raise EntityNotFoundError(_ENTITY, booking_id)
        return booking

    async def list_bookings(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> BookingPage:
        return await self._repository.get_all(
            status=status,
            search=search.strip() if search else None,
            page=page,
            limit=limit,
        )

    async def create_booking(self, data: BookingCreate) -> DalaiLamaBooking:
        booking = DalaiLamaBooking(
            customer_name=data.customer_name.strip(),
            email=data.email.strip(),
            phone=data.phone.strip(),
            message=data.message,
            travelers=data.travelers,
            selected_date=data.selected_date,
            total_amount=data.total_amount,
        )
        created = await self._repository.create(booking)
        logger.info("Booking %s submitted for %s", created.booking_id, created.selected_date)
        return created

    async def update_booking(self, booking_id: str, data: BookingUpdate) -> DalaiLamaBooking:
        # None means "leave unchanged"
        changes = data.model_dump(exclude_none=True)
        updated = await self._repository.update(booking_id, changes)
        if updated is None:
            raise EntityNotFoundError(_ENTITY, booking_id)
        return updated

    async def delete_booking(self, booking_id: str) -> bool:
        deleted = await self._repository.delete(booking_id)
        if not deleted:
            raise EntityNotFoundError(_ENTITY, booking_id)
        return deleted

    async def count_bookings(self, status: BookingStatus | None = None) -> int:
        return await self._repository.count(status)

    async def get_stats(self) -> BookingStats:
        return await self._repository.get_stats()
