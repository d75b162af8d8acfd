"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends

from app.config import get_settings
from app.application.services import DalaiLamaBookingService
from app.infrastructure.repositories import JsonDalaiLamaBookingRepository, build_booking_schema
from app.infrastructure.storage.json_list_store import JsonListStore


@lru_cache
def get_booking_store() -> JsonListStore:
    """Process-wide store for the bookings file.

    A single instance owns the file so its write lock serializes every
    mutation made through the API.
    """
    settings = get_settings()
    schema = build_booking_schema(
        code_prefix=settings.booking_code_prefix,
        code_width=settings.booking_code_width,
    )
    return JsonListStore(settings.bookings_file, schema)


async def get_booking_service(
    store: JsonListStore = Depends(get_booking_store),
) -> AsyncGenerator[DalaiLamaBookingService, None]:
    """Provides a DalaiLamaBookingService with its repository wired up."""
    repository = JsonDalaiLamaBookingRepository(store)
    yield DalaiLamaBookingService(repository)
