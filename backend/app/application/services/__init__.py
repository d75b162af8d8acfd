from .booking_service import DalaiLamaBookingService

__all__ = [
    "DalaiLamaBookingService",
]
