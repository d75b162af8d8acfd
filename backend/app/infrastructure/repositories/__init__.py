from .json_booking_repository import JsonDalaiLamaBookingRepository, build_booking_schema

__all__ = [
    "JsonDalaiLamaBookingRepository",
    "build_booking_schema",
]
