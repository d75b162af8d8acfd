from .booking import BookingPage, BookingStats, BookingStatus, DalaiLamaBooking

__all__ = [
    "BookingPage",
    "BookingStats",
    "BookingStatus",
    "DalaiLamaBooking",
]
