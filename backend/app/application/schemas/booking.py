"""Pydantic DTOs (Data Transfer Objects) for the Dalai Lama booking feature.

JSON uses camelCase keys (``customerName``, ``bookingId`` …); snake_case
names are accepted on input as well.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from app.domain.entities import BookingStatus

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

_CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class BookingCreate(BaseModel):
    """Schema for submitting a new booking inquiry."""

    customer_name: str = Field(..., min_length=1, max_length=200, examples=["Tenzin Dorje"])
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN, examples=["tenzin@example.com"])
    phone: str = Field(..., min_length=1, max_length=40, examples=["+91 98160 00000"])
    message: str = Field("", max_length=2000)
    travelers: int = Field(..., ge=1, le=100, examples=[2])
    selected_date: str = Field(..., min_length=1, max_length=40, examples=["2026-11-14"])
    total_amount: float = Field(..., ge=0, allow_inf_nan=False, examples=[4500])

    model_config = {**_CAMEL_CONFIG}


class BookingUpdate(BaseModel):
    """Schema for revising a booking. All fields optional, at least one required."""

    status: BookingStatus | None = None
    total_amount: float | None = Field(None, ge=0, allow_inf_nan=False)
    message: str | None = Field(None, max_length=2000)
    travelers: int | None = Field(None, ge=1, le=100)
    selected_date: str | None = Field(None, min_length=1, max_length=40)

    model_config = {**_CAMEL_CONFIG}

    @model_validator(mode="after")
    def require_a_change(self) -> "BookingUpdate":
        if not self.model_dump(exclude_none=True):
            raise ValueError("Provide at least one field to update")
        return self


class BookingResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    booking_id: str | None
    customer_name: str
    email: str
    phone: str
    message: str
    travelers: int
    selected_date: str
    total_amount: float | None
    status: BookingStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, **_CAMEL_CONFIG}


class BookingCreatedResponse(BaseModel):
    message: str
    booking: BookingResponse

    model_config = {**_CAMEL_CONFIG}


class PaginationSchema(BaseModel):
    total: int
    page: int
    pages: int


class BookingListResponse(BaseModel):
    """One page of bookings with pagination details."""

    results: int
    bookings: list[BookingResponse]
    pagination: PaginationSchema


class BookingStatsResponse(BaseModel):
    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int
    total_revenue: float
    avg_booking_value: int

    model_config = {"from_attributes": True, **_CAMEL_CONFIG}


class BookingCountResponse(BaseModel):
    count: int
