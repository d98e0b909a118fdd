from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.clock import Clock, get_clock
from app.schemas.booking import AvailabilityResponse, Booking as BookingSchema, BookingCreate
from app.schemas.common import ErrorResponse
from app.services import availability as availability_service
from app.services import bookings as booking_service
from app.utils.timeslots import parse_date

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# GET /bookings/availability?date=
# ---------------------------------------------------------------------------


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    responses={400: {"model": ErrorResponse}},
)
def check_availability(
    date: str = Query(..., description="Date to check availability (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Availability of every remaining time slot on a date, per seating area.

    Today's slots whose hour has already started are omitted. A malformed
    date is a **400**, the same as a past one.
    """
    return availability_service.resolve_availability(db, parse_date(date), clock)


# ---------------------------------------------------------------------------
# POST /bookings
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=BookingSchema,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Book a table. The booking is confirmed immediately.

    - **400**: past date, or a time slot that does not exist on that date.
    - **409**: the slot is already reserved or blocked for that area.
    """
    return booking_service.create_booking(db, data, clock)
