"""
Booking State Machine.

Create/update/status/remove for table reservations. The availability check is
a fast-fail: the partial unique index on (date, time_slot, environment) for
non-cancelled rows decides concurrent races, and its IntegrityError is mapped
to the same ConflictError the pre-check raises.
"""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.errors import ConflictError, InvalidSlotError, NotFoundError
from app.models.booking import Booking, BookingStatus, Environment
from app.schemas.booking import BookingCreate, BookingUpdate
from app.services.availability import ensure_not_past, is_blocked, resolve_availability

logger = logging.getLogger(__name__)

SLOT_TAKEN = "This time slot is already reserved or blocked"
SLOT_RETAKEN = (
    "This time slot has since been reserved by another customer. "
    "The customer will need to make a new booking for another time."
)
SLOT_NOW_BLOCKED = "This time slot has been blocked by an administrator."


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_slot(
    db: Session,
    day: date,
    time_slot: str,
    environment: Environment,
    clock: Clock,
    exclude_booking_id: Optional[UUID] = None,
) -> None:
    """Run the full resolver for `day` and require (time_slot, environment) to be free."""
    availability = resolve_availability(db, day, clock, exclude_booking_id=exclude_booking_id)
    slot = availability.slot(time_slot)
    if slot is None:
        raise InvalidSlotError("Invalid time slot for this date")

    available = slot.available_indoor if environment == Environment.INDOOR else slot.available_outdoor
    if not available:
        logger.warning("Slot %s %s %s unavailable", day, time_slot, environment.value)
        raise ConflictError(SLOT_TAKEN)


def _commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Booking uniqueness constraint rejected a write")
        raise ConflictError(message) from None


def get_booking(db: Session, booking_id: UUID) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def list_bookings(
    db: Session,
    page: int = 1,
    limit: int = 10,
    day: Optional[date] = None,
    status: Optional[BookingStatus] = None,
    environment: Optional[Environment] = None,
):
    """Return (rows, total) ordered by date then time slot."""
    query = db.query(Booking)
    if day:
        query = query.filter(Booking.date == day)
    if status:
        query = query.filter(Booking.status == status)
    if environment:
        query = query.filter(Booking.environment == environment)

    total = query.count()
    rows = (
        query.order_by(Booking.date.asc(), Booking.time_slot.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def bookings_for_date(db: Session, day: date) -> List[Booking]:
    """Non-cancelled bookings of a day, in slot order."""
    return (
        db.query(Booking)
        .filter(Booking.date == day, Booking.status != BookingStatus.CANCELLED)
        .order_by(Booking.time_slot.asc())
        .all()
    )


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def create_booking(db: Session, data: BookingCreate, clock: Clock) -> Booking:
    """
    Public booking. Bookings are created CONFIRMED, so the slot is unavailable
    immediately; if something is wrong an admin cancels and the slot frees up.
    """
    ensure_not_past(data.date, clock, "Cannot book a past date")
    _check_slot(db, data.date, data.time_slot, data.environment, clock)

    booking = Booking(
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        date=data.date,
        time_slot=data.time_slot,
        environment=data.environment,
        guests=data.guests,
        observations=data.observations,
        status=BookingStatus.CONFIRMED,
    )
    db.add(booking)
    _commit_or_conflict(db, SLOT_TAKEN)
    db.refresh(booking)

    logger.info(
        "Booking %s confirmed for %s %s %s (%d guests)",
        booking.id, booking.date, booking.time_slot, booking.environment.value, booking.guests,
    )
    return booking


def update_booking(db: Session, booking_id: UUID, data: BookingUpdate, clock: Clock) -> Booking:
    """
    Partial edit. Moving the booking (date, slot or environment) re-runs the
    full availability resolver for the target, ignoring the booking's own row.
    """
    booking = get_booking(db, booking_id)
    changes = data.model_dump(exclude_unset=True)

    new_date = changes.get("date", booking.date)
    new_slot = changes.get("time_slot", booking.time_slot)
    new_environment = changes.get("environment", booking.environment)

    moving = (new_date, new_slot, new_environment) != (booking.date, booking.time_slot, booking.environment)
    if moving:
        ensure_not_past(new_date, clock, "Cannot move a booking to a past date")
        _check_slot(db, new_date, new_slot, new_environment, clock, exclude_booking_id=booking.id)

    for field, value in changes.items():
        setattr(booking, field, value)

    _commit_or_conflict(db, SLOT_TAKEN)
    db.refresh(booking)
    if moving:
        logger.info("Booking %s moved to %s %s %s", booking.id, new_date, new_slot, new_environment.value)
    return booking


def update_booking_status(db: Session, booking_id: UUID, new_status: BookingStatus) -> Booking:
    """
    Change a booking's status.

    Only CANCELLED -> CONFIRMED is guarded: someone else may have taken the
    slot, or an admin may have blocked it, since the cancellation.
    """
    booking = get_booking(db, booking_id)

    if booking.status == BookingStatus.CANCELLED and new_status == BookingStatus.CONFIRMED:
        conflicting = (
            db.query(Booking.id)
            .filter(
                Booking.id != booking.id,
                Booking.date == booking.date,
                Booking.time_slot == booking.time_slot,
                Booking.environment == booking.environment,
                Booking.status != BookingStatus.CANCELLED,
            )
            .first()
        )
        if conflicting:
            raise ConflictError(SLOT_RETAKEN)
        if is_blocked(db, booking.date, booking.time_slot, booking.environment):
            raise ConflictError(SLOT_NOW_BLOCKED)

    previous = booking.status
    booking.status = new_status
    _commit_or_conflict(db, SLOT_RETAKEN)
    db.refresh(booking)

    logger.info("Booking %s status %s -> %s", booking.id, previous.value, new_status.value)
    return booking


def remove_booking(db: Session, booking_id: UUID) -> None:
    booking = get_booking(db, booking_id)
    db.delete(booking)
    db.commit()
    logger.info("Booking %s removed", booking_id)
