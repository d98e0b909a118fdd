"""
Availability Resolver.

Builds the per-slot, per-environment availability matrix for a date from the
slot calendar, the non-cancelled bookings of that date, and the admin blocks.
Read-only: used by the public availability endpoint and as the precondition
check inside booking create/update.
"""
from datetime import date
from typing import Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.errors import PastDateError
from app.models.booking import Booking, BookingStatus, Environment
from app.models.blocked_slot import BlockedSlot
from app.schemas.booking import AvailabilityResponse, TimeSlotAvailability
from app.utils.timeslots import is_weekend, remaining_slots


def ensure_not_past(day: date, clock: Clock, message: Optional[str] = None) -> None:
    """Local-midnight comparison: today is allowed, yesterday is not."""
    if day < clock.today():
        raise PastDateError(message)


def _occupied(db: Session, day: date, exclude_booking_id: Optional[UUID]) -> Set[Tuple[str, Environment]]:
    query = db.query(Booking.time_slot, Booking.environment).filter(
        Booking.date == day,
        Booking.status != BookingStatus.CANCELLED,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return {(time_slot, environment) for time_slot, environment in query.all()}


def _blocked(db: Session, day: date) -> Set[Tuple[str, Optional[Environment]]]:
    rows = db.query(BlockedSlot.time_slot, BlockedSlot.environment).filter(BlockedSlot.date == day).all()
    return {(time_slot, environment) for time_slot, environment in rows}


def _is_free(label: str, environment: Environment, occupied, blocked) -> bool:
    return (
        (label, environment) not in occupied
        and (label, environment) not in blocked
        and (label, None) not in blocked
    )


def resolve_availability(
    db: Session,
    day: date,
    clock: Clock,
    exclude_booking_id: Optional[UUID] = None,
) -> AvailabilityResponse:
    """
    Availability matrix for `day`.

    - Past dates raise PastDateError.
    - For today, labels whose hour already started are dropped (00:00 counts as 24).
    - An environment is unavailable when a non-cancelled booking holds it, or a
      block exists for that environment or for both (environment NULL).
    - `exclude_booking_id` ignores one booking's own row, so an edit never
      conflicts with itself.
    """
    ensure_not_past(day, clock, "Cannot check availability for past dates")

    labels = remaining_slots(day, clock.now())
    occupied = _occupied(db, day, exclude_booking_id)
    blocked = _blocked(db, day)

    time_slots = [
        TimeSlotAvailability(
            time=label,
            available_indoor=_is_free(label, Environment.INDOOR, occupied, blocked),
            available_outdoor=_is_free(label, Environment.OUTDOOR, occupied, blocked),
        )
        for label in labels
    ]
    return AvailabilityResponse(date=day, is_weekend=is_weekend(day), time_slots=time_slots)


def is_blocked(db: Session, day: date, time_slot: str, environment: Environment) -> bool:
    """True when a block covers this environment, either directly or via a both-areas block."""
    return (
        db.query(BlockedSlot.id)
        .filter(
            BlockedSlot.date == day,
            BlockedSlot.time_slot == time_slot,
            or_(BlockedSlot.environment == environment, BlockedSlot.environment == None),  # noqa: E711
        )
        .first()
        is not None
    )
