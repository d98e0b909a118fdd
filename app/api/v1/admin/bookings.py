from uuid import UUID
from typing import List, Optional
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user, get_current_staff_user
from app.core.clock import Clock, get_clock
from app.models.user import User
from app.models.booking import BookingStatus, Environment
from app.schemas.booking import Booking as BookingSchema, BookingStatusUpdate, BookingUpdate
from app.schemas.common import ErrorResponse, PaginatedResponse
from app.services import bookings as booking_service

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_all_bookings(
    # --- Filters ---
    date: Optional[date] = Query(None, description="Filter by booking date (YYYY-MM-DD)"),
    status: Optional[BookingStatus] = Query(None, description="Filter by status"),
    environment: Optional[Environment] = Query(None, description="Filter by seating area"),
    # --- Pagination ---
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """All bookings ordered by date and time slot, with optional filters."""
    bookings, total = booking_service.list_bookings(
        db, page=page, limit=limit, day=date, status=status, environment=environment,
    )
    return PaginatedResponse(
        data=[BookingSchema.model_validate(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/by-date/{day}", response_model=List[BookingSchema])
def list_bookings_for_date(
    day: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """Active (non-cancelled) bookings of one day, in slot order."""
    return booking_service.bookings_for_date(db, day)


@router.get("/{booking_id}", response_model=BookingSchema, responses={404: {"model": ErrorResponse}})
def get_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    return booking_service.get_booking(db, booking_id)


@router.put(
    "/{booking_id}",
    response_model=BookingSchema,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_booking(
    booking_id: UUID,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_staff_user),
):
    """
    Edit a booking. Moving it to another date, time slot or area re-checks
    availability for the new combination.
    """
    return booking_service.update_booking(db, booking_id, data, clock)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingSchema,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_booking_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    """
    Change the status. Re-confirming a cancelled booking fails with **409** if
    the slot was taken or blocked in the meantime; the customer must rebook.
    """
    return booking_service.update_booking_status(db, booking_id, data.status)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
def delete_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    booking_service.remove_booking(db, booking_id)
