from .booking_repository import DalaiLamaBookingRepository

__all__ = [
    "DalaiLamaBookingRepository",
]
