from .booking import (
    BookingCreate,
    BookingCountResponse,
    BookingCreatedResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatsResponse,
    BookingUpdate,
    PaginationSchema,
)

__all__ = [
    "BookingCreate",
    "BookingCountResponse",
    "BookingCreatedResponse",
    "BookingListResponse",
    "BookingResponse",
    "BookingStatsResponse",
    "BookingUpdate",
    "PaginationSchema",
]
