"""Abstract repository interface (port) for DalaiLamaBooking persistence."""

from abc import ABC, abstractmethod
from typing import Any

from app.domain.entities import BookingPage, BookingStats, BookingStatus, DalaiLamaBooking


class DalaiLamaBookingRepository(ABC):
    """Port for booking persistence — implemented in the infrastructure layer.

    Lookups signal a missing booking with ``None`` / ``False`` rather than
    raising; the service layer decides what that means.
    """

    @abstractmethod
    async def create(self, booking: DalaiLamaBooking) -> DalaiLamaBooking:
        """Persist a new booking; returns it with id, code, status and timestamps set."""
        ...

    @abstractmethod
    async def get_all(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> BookingPage:
        """Filtered page of bookings, newest first."""
        ...

    @abstractmethod
    async def get_by_id(self, booking_id: str) -> DalaiLamaBooking | None:
        ...

    @abstractmethod
    async def update(
        self, booking_id: str, changes: dict[str, Any]
    ) -> DalaiLamaBooking | None:
        """Apply a partial update keyed by entity field name."""
        ...

    @abstractmethod
    async def delete(self, booking_id: str) -> bool:
        """Delete a booking. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def count(self, status: BookingStatus | None = None) -> int:
        ...

    @abstractmethod
    async def get_stats(self) -> BookingStats:
        ...
