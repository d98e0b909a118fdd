"""
Queue State Machine for the walk-in digital queue.

    WAITING -> CALLED -> SEATED | NO_SHOW
    WAITING | CALLED -> CANCELLED            (admin)
    WAITING | CALLED -> EXPIRED              (clear / daily sweep)

The queue is scoped to the local calendar day of the injected clock.
"""
import logging
import random
import string
from typing import Callable, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.config import settings
from app.core.errors import CodeGenerationError, InvalidTransitionError, NotFoundError, QueueConflictError
from app.models.queue_entry import QueueEntry, QueueStatus
from app.schemas.queue import QueueEntry as QueueEntrySchema, QueueEntryCreate, QueuePosition, QueueStats
from app.services.queue_position import queue_position, waiting_positions
from app.utils.timeslots import day_bounds

logger = logging.getLogger(__name__)

# No I or O: they read as 1 and 0 on a phone screen
CODE_LETTERS = "".join(c for c in string.ascii_uppercase if c not in "IO")
CODE_DIGITS = string.digits

ACTIVE_STATUSES = (QueueStatus.WAITING, QueueStatus.CALLED)

_TRANSITIONS: Dict[QueueStatus, Tuple[QueueStatus, ...]] = {
    QueueStatus.WAITING: (QueueStatus.CALLED, QueueStatus.CANCELLED, QueueStatus.EXPIRED),
    QueueStatus.CALLED: (QueueStatus.SEATED, QueueStatus.NO_SHOW, QueueStatus.CANCELLED, QueueStatus.EXPIRED),
}

_STATUS_MESSAGES = {
    QueueStatus.CALLED: "It's your turn! Please come to the front desk.",
    QueueStatus.SEATED: "You have already been seated. Enjoy your meal!",
    QueueStatus.CANCELLED: "Your queue entry was cancelled.",
    QueueStatus.NO_SHOW: "You were called but did not show up. Join the queue again if you wish.",
    QueueStatus.EXPIRED: "Your entry expired (previous day's queue). Please join again.",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def generate_queue_code(rng: random.Random = random) -> str:
    """3 letters from a confusable-free alphabet followed by 3 digits, e.g. 'KXA274'."""
    return "".join(rng.choices(CODE_LETTERS, k=3)) + "".join(rng.choices(CODE_DIGITS, k=3))


def _serialize(entry: QueueEntry, position: int = 0) -> QueueEntrySchema:
    out = QueueEntrySchema.model_validate(entry)
    out.position = position
    out.people_ahead = position - 1 if position > 0 else 0
    return out


def _get_entry(db: Session, entry_id: UUID) -> QueueEntry:
    entry = db.query(QueueEntry).filter(QueueEntry.id == entry_id).first()
    if not entry:
        raise NotFoundError("Queue entry not found")
    return entry


def _transition(db: Session, entry_id: UUID, target: QueueStatus, message: str, **values) -> QueueEntrySchema:
    entry = _get_entry(db, entry_id)
    current = entry.status
    if target not in _TRANSITIONS.get(current, ()):
        raise InvalidTransitionError(message)

    # Conditional on the status we validated, so two staff members acting on
    # the same entry cannot both apply a transition.
    updated = (
        db.query(QueueEntry)
        .filter(QueueEntry.id == entry.id, QueueEntry.status == current)
        .update({"status": target, **values}, synchronize_session=False)
    )
    db.commit()
    if not updated:
        raise InvalidTransitionError(message)

    db.refresh(entry)
    logger.info("Queue entry %s (%s) %s -> %s", entry.code, entry.id, current.value, target.value)
    return _serialize(entry)


def waiting_entry_for_phone(db: Session, phone: str, clock: Clock) -> Optional[QueueEntry]:
    return (
        db.query(QueueEntry)
        .filter(
            QueueEntry.phone == phone,
            QueueEntry.queue_day == clock.today(),
            QueueEntry.status == QueueStatus.WAITING,
        )
        .first()
    )


def _raise_rejoin(db: Session, existing: QueueEntry, clock: Clock) -> None:
    position = queue_position(db, existing, clock)
    logger.warning("Phone already waiting as %s at position %d", existing.code, position)
    raise QueueConflictError(code=existing.code, position=position)


def _today_query(db: Session, clock: Clock):
    start, end = day_bounds(clock.today())
    return db.query(QueueEntry).filter(QueueEntry.created_at >= start, QueueEntry.created_at < end)


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


def join_queue(
    db: Session,
    data: QueueEntryCreate,
    clock: Clock,
    generate_code: Callable[[], str] = generate_queue_code,
) -> QueueEntrySchema:
    """
    Add a walk-in party to today's queue.

    A phone already WAITING today gets QueueConflictError with its current code
    and position: re-joining (e.g. after a page refresh) is expected.
    """
    existing = waiting_entry_for_phone(db, data.phone, clock)
    if existing:
        _raise_rejoin(db, existing, clock)

    for _ in range(settings.QUEUE_CODE_MAX_ATTEMPTS):
        code = generate_code()
        if db.query(QueueEntry.id).filter(QueueEntry.code == code).first():
            continue

        entry = QueueEntry(
            code=code,
            name=data.name,
            phone=data.phone,
            party_size=data.party_size,
            status=QueueStatus.WAITING,
            created_at=clock.now(),
            queue_day=clock.today(),
        )
        db.add(entry)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            # A concurrent join for this phone won the waiting-phone index
            winner = waiting_entry_for_phone(db, data.phone, clock)
            if winner:
                _raise_rejoin(db, winner, clock)
            # Otherwise another join took the same code
            continue

        db.refresh(entry)
        position = queue_position(db, entry, clock)
        logger.info("Queue entry %s joined (party of %d) at position %d", entry.code, entry.party_size, position)
        return _serialize(entry, position)

    logger.error("Gave up generating a queue code after %d attempts", settings.QUEUE_CODE_MAX_ATTEMPTS)
    raise CodeGenerationError()


def lookup_by_code(db: Session, code: str, clock: Clock) -> QueuePosition:
    entry = db.query(QueueEntry).filter(QueueEntry.code == code.strip().upper()).first()
    if not entry:
        raise NotFoundError("Code not found")

    position = 0
    people_ahead = 0
    estimated_wait: Optional[int] = None

    if entry.status == QueueStatus.WAITING:
        position = queue_position(db, entry, clock)
        people_ahead = max(position - 1, 0)
        if position:
            estimated_wait = people_ahead * settings.QUEUE_MINUTES_PER_PARTY
        if position == 1:
            message = "You're next! Please wait to be called."
        elif position == 0:
            # Still WAITING from a previous day, the daily sweep has not run yet
            message = _STATUS_MESSAGES[QueueStatus.EXPIRED]
        else:
            message = f"You are number {position} in line. {people_ahead} group(s) ahead of you."
    else:
        message = _STATUS_MESSAGES[entry.status]

    return QueuePosition(
        code=entry.code,
        name=entry.name,
        position=position,
        people_ahead=people_ahead,
        status=entry.status,
        estimated_wait_minutes=estimated_wait,
        message=message,
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


def list_queue(
    db: Session,
    clock: Clock,
    status: Optional[QueueStatus] = None,
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[QueueEntrySchema], int]:
    """Today's entries: called first, then waiting in line order, then the rest."""
    query = _today_query(db, clock)
    if status:
        query = query.filter(QueueEntry.status == status)

    total = query.count()
    attention = case(
        (QueueEntry.status == QueueStatus.CALLED, 0),
        (QueueEntry.status == QueueStatus.WAITING, 1),
        else_=2,
    )
    entries = (
        query.order_by(attention, QueueEntry.created_at.asc(), QueueEntry.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    positions = waiting_positions(db, clock)
    return [_serialize(e, positions.get(e.id, 0)) for e in entries], total


def queue_stats(db: Session, clock: Clock) -> QueueStats:
    start, end = day_bounds(clock.today())
    rows = (
        db.query(QueueEntry.status, func.count(QueueEntry.id))
        .filter(QueueEntry.created_at >= start, QueueEntry.created_at < end)
        .group_by(QueueEntry.status)
        .all()
    )
    counts = {status: count for status, count in rows}
    return QueueStats(
        waiting=counts.get(QueueStatus.WAITING, 0),
        called=counts.get(QueueStatus.CALLED, 0),
        seated=counts.get(QueueStatus.SEATED, 0),
        no_show=counts.get(QueueStatus.NO_SHOW, 0),
        cancelled=counts.get(QueueStatus.CANCELLED, 0),
        expired=counts.get(QueueStatus.EXPIRED, 0),
    )


def call_entry(db: Session, entry_id: UUID, clock: Clock) -> QueueEntrySchema:
    return _transition(db, entry_id, QueueStatus.CALLED, "This entry is not waiting", called_at=clock.now())


def seat_entry(db: Session, entry_id: UUID, clock: Clock) -> QueueEntrySchema:
    return _transition(db, entry_id, QueueStatus.SEATED, "This entry has not been called yet", seated_at=clock.now())


def mark_no_show(db: Session, entry_id: UUID) -> QueueEntrySchema:
    return _transition(db, entry_id, QueueStatus.NO_SHOW, "This entry has not been called yet")


def cancel_entry(db: Session, entry_id: UUID) -> QueueEntrySchema:
    return _transition(db, entry_id, QueueStatus.CANCELLED, "This entry can no longer be cancelled")


def clear_queue(db: Session, clock: Clock) -> int:
    """Expire every waiting/called entry of today (manual end-of-service reset)."""
    start, end = day_bounds(clock.today())
    count = (
        db.query(QueueEntry)
        .filter(
            QueueEntry.status.in_(ACTIVE_STATUSES),
            QueueEntry.created_at >= start,
            QueueEntry.created_at < end,
        )
        .update({"status": QueueStatus.EXPIRED}, synchronize_session=False)
    )
    db.commit()
    logger.info("Cleared today's queue, %d entries expired", count)
    return count


def auto_expire(db: Session, clock: Clock) -> int:
    """Expire waiting/called entries created before today's local midnight. Safe to re-run."""
    midnight, _ = day_bounds(clock.today())
    count = (
        db.query(QueueEntry)
        .filter(
            QueueEntry.status.in_(ACTIVE_STATUSES),
            QueueEntry.created_at < midnight,
        )
        .update({"status": QueueStatus.EXPIRED}, synchronize_session=False)
    )
    db.commit()
    return count
