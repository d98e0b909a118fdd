"""
Queue Position Engine.

Positions are derived on every read, never stored: a WAITING entry's rank is
1 + the number of today's WAITING entries ordered before it by
(created_at, id). The id tiebreak gives a total order when timestamps collide.
"""
from typing import Dict
from uuid import UUID

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.models.queue_entry import QueueEntry, QueueStatus
from app.utils.timeslots import day_bounds


def queue_position(db: Session, entry: QueueEntry, clock: Clock) -> int:
    """1-based rank among today's waiting entries; 0 when not waiting or not from today."""
    if entry.status != QueueStatus.WAITING:
        return 0

    start, end = day_bounds(clock.today())
    if not (start <= entry.created_at < end):
        return 0

    ahead = (
        db.query(func.count(QueueEntry.id))
        .filter(
            QueueEntry.status == QueueStatus.WAITING,
            QueueEntry.created_at >= start,
            QueueEntry.created_at < end,
            or_(
                QueueEntry.created_at < entry.created_at,
                and_(QueueEntry.created_at == entry.created_at, QueueEntry.id < entry.id),
            ),
        )
        .scalar()
        or 0
    )
    return ahead + 1


def waiting_positions(db: Session, clock: Clock) -> Dict[UUID, int]:
    """Rank of every waiting entry of today, computed in one pass."""
    start, end = day_bounds(clock.today())
    ids = (
        db.query(QueueEntry.id)
        .filter(
            QueueEntry.status == QueueStatus.WAITING,
            QueueEntry.created_at >= start,
            QueueEntry.created_at < end,
        )
        .order_by(QueueEntry.created_at.asc(), QueueEntry.id.asc())
        .all()
    )
    return {entry_id: rank for rank, (entry_id,) in enumerate(ids, start=1)}
