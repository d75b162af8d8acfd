"""Domain entities for Dalai Lama darshan booking inquiries."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class BookingStatus(str, Enum):
    """Lifecycle states of a booking.

    No transition graph is enforced; an admin may move a booking from any
    state to any other.
    """

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


@dataclass
class DalaiLamaBooking:
    """A visitor's request to attend a public audience (darshan).

    ``id``, ``booking_id`` (the ``DL000042``-style sequence code), status and
    timestamps are assigned by the store on creation.
    """

    customer_name: str
    email: str
    phone: str
    travelers: int
    selected_date: str
    message: str = ""
    total_amount: float | None = None  # pricing is settled after the inquiry
    id: str | None = None
    booking_id: str | None = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class BookingPage:
    """One page of bookings plus the size of the filtered result set."""

    bookings: list[DalaiLamaBooking] = field(default_factory=list)
    total: int = 0
    pages: int = 0


@dataclass
class BookingStats:
    """Dashboard summary across all bookings."""

    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int
    total_revenue: float
    avg_booking_value: int
