from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user, get_current_staff_user
from app.core.clock import Clock, get_clock
from app.models.user import User
from app.models.queue_entry import QueueStatus
from app.schemas.common import ErrorResponse, PaginatedResponse
from app.schemas.queue import QueueClearResponse, QueueEntry as QueueEntrySchema, QueueStats
from app.services import queue as queue_service

router = APIRouter(prefix="/admin/queue", tags=["Admin - Queue"])

_TRANSITION_ERRORS = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get("/", response_model=PaginatedResponse[QueueEntrySchema])
def list_queue(
    status: Optional[QueueStatus] = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_staff_user),
):
    """Today's queue with live positions for waiting parties."""
    entries, total = queue_service.list_queue(db, clock, status=status, page=page, limit=limit)
    return PaginatedResponse(
        data=entries,
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/stats", response_model=QueueStats)
def queue_stats(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_staff_user),
):
    return queue_service.queue_stats(db, clock)


@router.delete("/clear", response_model=QueueClearResponse)
def clear_queue(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_admin_user),
):
    """Expire every waiting or called entry of today."""
    count = queue_service.clear_queue(db, clock)
    return QueueClearResponse(count=count, message=f"{count} entries expired")


@router.patch("/{entry_id}/call", response_model=QueueEntrySchema, responses=_TRANSITION_ERRORS)
def call_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_staff_user),
):
    return queue_service.call_entry(db, entry_id, clock)


@router.patch("/{entry_id}/seat", response_model=QueueEntrySchema, responses=_TRANSITION_ERRORS)
def seat_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_staff_user),
):
    return queue_service.seat_entry(db, entry_id, clock)


@router.patch("/{entry_id}/no-show", response_model=QueueEntrySchema, responses=_TRANSITION_ERRORS)
def mark_no_show(
    entry_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    return queue_service.mark_no_show(db, entry_id)


@router.patch("/{entry_id}/cancel", response_model=QueueEntrySchema, responses=_TRANSITION_ERRORS)
def cancel_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    return queue_service.cancel_entry(db, entry_id)
