from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, UUID4, field_validator
import datetime as dt

from app.models.booking import BookingStatus, Environment

# Zero-padded "HH:MM", the shape the slot calendar produces
TIME_SLOT_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"
# Brazilian-style numbers as typed in the booking form, e.g. "(11) 99999-9999"
PHONE_PATTERN = r"^\(?[1-9]{2}\)?\s?9?\d{4}[-\s]?\d{4}$"


# Booking: Create (POST /bookings)
class BookingCreate(BaseModel):
    customer_name: str = Field(..., min_length=3, max_length=100)
    customer_email: EmailStr
    customer_phone: str = Field(..., pattern=PHONE_PATTERN)
    date: dt.date
    time_slot: str = Field(..., pattern=TIME_SLOT_PATTERN)
    environment: Environment
    guests: int = Field(..., ge=1, le=20)
    observations: Optional[str] = Field(None, max_length=500)


# Booking: Update (PUT /admin/bookings/{id}); status has its own endpoint
class BookingUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=3, max_length=100)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    date: Optional[dt.date] = None
    time_slot: Optional[str] = Field(None, pattern=TIME_SLOT_PATTERN)
    environment: Optional[Environment] = None
    guests: Optional[int] = Field(None, ge=1, le=20)
    observations: Optional[str] = Field(None, max_length=500)

    # Omitted means unchanged; only observations may be cleared with null
    @field_validator(
        "customer_name", "customer_email", "customer_phone",
        "date", "time_slot", "environment", "guests",
        mode="before",
    )
    @classmethod
    def reject_null_for_required(cls, v):
        if v is None:
            raise ValueError("This field cannot be cleared")
        return v


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


# Booking: DB response
class Booking(BaseModel):
    id: UUID4
    customer_name: str
    customer_email: str
    customer_phone: str
    date: dt.date
    time_slot: str
    environment: Environment
    guests: int
    observations: Optional[str] = None
    status: BookingStatus
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


# Availability matrix (GET /bookings/availability)
class TimeSlotAvailability(BaseModel):
    time: str
    available_indoor: bool
    available_outdoor: bool


class AvailabilityResponse(BaseModel):
    date: dt.date
    is_weekend: bool
    time_slots: List[TimeSlotAvailability]

    def slot(self, label: str) -> Optional[TimeSlotAvailability]:
        for entry in self.time_slots:
            if entry.time == label:
                return entry
        return None
