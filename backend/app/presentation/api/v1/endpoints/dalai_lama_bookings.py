"""Dalai Lama darshan booking endpoints.

POST is the public inquiry form; everything else backs the admin console.
``/admin/*`` routes are declared before ``/{booking_id}`` so they are not
captured by the path parameter.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.application.schemas.booking import (
    BookingCountResponse,
    BookingCreate,
    BookingCreatedResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatsResponse,
    BookingUpdate,
    PaginationSchema,
)
from app.application.services import DalaiLamaBookingService
from app.config import get_settings
from app.domain.entities import BookingStatus
from app.domain.exceptions import EntityNotFoundError, StoreError
from app.infrastructure.dependencies import get_booking_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dalai-lama-bookings", tags=["Dalai Lama Bookings"])

CREATED_MESSAGE = (
    "Dalai Lama Darshan booking request submitted successfully. "
    "We will contact you soon."
)


def _store_failure(exc: StoreError) -> HTTPException:
    logger.exception("Booking store failure: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Booking storage is unavailable",
    )


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> BookingCreatedResponse:
    """Submit a new booking inquiry."""
    try:
        booking = await service.create_booking(data)
    except StoreError as e:
        raise _store_failure(e)
    return BookingCreatedResponse(
        message=CREATED_MESSAGE,
        booking=BookingResponse.model_validate(booking, from_attributes=True),
    )


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    status_filter: str | None = Query(
        None, alias="status", description="Exact status, or 'All' for no filter"
    ),
    search: str | None = Query(None, description="Name, email, phone or booking code"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """Retrieve a filtered, paginated list of bookings, newest first."""
    settings = get_settings()
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    try:
        result = await service.list_bookings(
            status=status_filter, search=search, page=page, limit=page_size
        )
    except StoreError as e:
        raise _store_failure(e)
    return BookingListResponse(
        results=len(result.bookings),
        bookings=[
            BookingResponse.model_validate(b, from_attributes=True) for b in result.bookings
        ],
        pagination=PaginationSchema(total=result.total, page=page, pages=result.pages),
    )


@router.get("/admin/stats", response_model=BookingStatsResponse)
async def get_booking_stats(
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> BookingStatsResponse:
    """Dashboard totals: counts per status, confirmed revenue and average value."""
    try:
        stats = await service.get_stats()
    except StoreError as e:
        raise _store_failure(e)
    return BookingStatsResponse.model_validate(stats, from_attributes=True)


@router.get("/admin/count", response_model=BookingCountResponse)
async def count_bookings(
    status_filter: BookingStatus | None = Query(None, alias="status"),
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> BookingCountResponse:
    """Number of bookings, optionally only those in one status."""
    try:
        total = await service.count_bookings(status_filter)
    except StoreError as e:
        raise _store_failure(e)
    return BookingCountResponse(count=total)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Retrieve a single booking by ID."""
    try:
        booking = await service.get_booking(booking_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_failure(e)
    return BookingResponse.model_validate(booking, from_attributes=True)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    data: BookingUpdate,
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Change a booking's status or admin-editable details."""
    try:
        booking = await service.update_booking(booking_id, data)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_failure(e)
    return BookingResponse.model_validate(booking, from_attributes=True)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: str,
    service: DalaiLamaBookingService = Depends(get_booking_service),
) -> None:
    """Delete a booking by ID."""
    try:
        await service.delete_booking(booking_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_failure(e)
