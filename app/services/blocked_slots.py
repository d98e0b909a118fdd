"""Blocked-Slot Manager: admin-imposed closures that the availability resolver treats as occupied."""
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.errors import ConflictError, InvalidSlotError, NotFoundError
from app.models.blocked_slot import BlockedSlot
from app.models.booking import Environment
from app.services.availability import ensure_not_past
from app.utils.timeslots import slots_for_date

logger = logging.getLogger(__name__)

ALREADY_BLOCKED = "This time slot is already blocked"
DEFAULT_DAY_REASON = "Day blocked"


def _find_exact(db: Session, day: date, time_slot: str, environment: Optional[Environment]) -> Optional[BlockedSlot]:
    """Exact match; a both-areas block (NULL) is distinct from INDOOR/OUTDOOR blocks."""
    query = db.query(BlockedSlot).filter(BlockedSlot.date == day, BlockedSlot.time_slot == time_slot)
    if environment is None:
        query = query.filter(BlockedSlot.environment == None)  # noqa: E711
    else:
        query = query.filter(BlockedSlot.environment == environment)
    return query.first()


def get_block(db: Session, block_id: UUID) -> BlockedSlot:
    block = db.query(BlockedSlot).filter(BlockedSlot.id == block_id).first()
    if not block:
        raise NotFoundError("Blocked slot not found")
    return block


def list_blocks(db: Session, day: Optional[date] = None, environment: Optional[Environment] = None):
    """Return (rows, total) ordered by date then time slot."""
    query = db.query(BlockedSlot)
    if day:
        query = query.filter(BlockedSlot.date == day)
    if environment:
        query = query.filter(BlockedSlot.environment == environment)
    total = query.count()
    rows = query.order_by(BlockedSlot.date.asc(), BlockedSlot.time_slot.asc()).all()
    return rows, total


def blocks_for_date(db: Session, day: date) -> List[BlockedSlot]:
    return (
        db.query(BlockedSlot)
        .filter(BlockedSlot.date == day)
        .order_by(BlockedSlot.time_slot.asc())
        .all()
    )


def create_block(
    db: Session,
    day: date,
    time_slot: str,
    clock: Clock,
    environment: Optional[Environment] = None,
    reason: Optional[str] = None,
) -> BlockedSlot:
    ensure_not_past(day, clock, "Cannot block time slots on past dates")
    if time_slot not in slots_for_date(day):
        raise InvalidSlotError("Invalid time slot for this date")
    if _find_exact(db, day, time_slot, environment):
        logger.warning("Slot %s %s already blocked", day, time_slot)
        raise ConflictError(ALREADY_BLOCKED)

    block = BlockedSlot(date=day, time_slot=time_slot, environment=environment, reason=reason)
    db.add(block)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ALREADY_BLOCKED) from None
    db.refresh(block)

    logger.info("Blocked %s %s (%s)", day, time_slot, environment.value if environment else "all areas")
    return block


def block_entire_day(
    db: Session,
    day: date,
    clock: Clock,
    environment: Optional[Environment] = None,
    reason: Optional[str] = None,
) -> List[BlockedSlot]:
    """
    Block every label of the day's calendar, including hours already gone today.

    Best effort: labels that already carry a block for this exact environment
    are skipped without error. Returns only the blocks created by this call.
    """
    ensure_not_past(day, clock, "Cannot block past dates")

    created = []
    for time_slot in slots_for_date(day):
        if _find_exact(db, day, time_slot, environment):
            continue
        block = BlockedSlot(
            date=day,
            time_slot=time_slot,
            environment=environment,
            reason=reason or DEFAULT_DAY_REASON,
        )
        try:
            with db.begin_nested():
                db.add(block)
        except IntegrityError:
            # Lost a race with another block for the same label
            continue
        created.append(block)

    db.commit()
    for block in created:
        db.refresh(block)

    logger.info("Blocked %d slot(s) on %s", len(created), day)
    return created


def unblock_entire_day(db: Session, day: date, environment: Optional[Environment] = None) -> int:
    """Delete the day's blocks; with `environment`, only that area's blocks (both-areas blocks stay)."""
    query = db.query(BlockedSlot).filter(BlockedSlot.date == day)
    if environment:
        query = query.filter(BlockedSlot.environment == environment)
    count = query.delete(synchronize_session=False)
    db.commit()

    logger.info("Removed %d block(s) on %s", count, day)
    return count


def remove_block(db: Session, block_id: UUID) -> None:
    block = get_block(db, block_id)
    db.delete(block)
    db.commit()
