from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.core.clock import Clock, get_clock
from app.schemas.common import ErrorResponse, QueueConflictResponse
from app.schemas.queue import QueueEntry as QueueEntrySchema, QueueEntryCreate, QueuePosition
from app.services import queue as queue_service

router = APIRouter(prefix="/queue", tags=["Queue"])


@router.post(
    "/",
    response_model=QueueEntrySchema,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": QueueConflictResponse}, 503: {"model": ErrorResponse}},
)
def join_queue(
    data: QueueEntryCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Join today's walk-in queue and receive a 6-character code.

    If this phone is already waiting today the response is **409** with the
    existing `code` and current `position`, so the client can simply resume.
    """
    return queue_service.join_queue(db, data, clock)


@router.get(
    "/status/{code}",
    response_model=QueuePosition,
    responses={404: {"model": ErrorResponse}},
)
def get_queue_status(
    code: str,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Position and status for a queue code (case-insensitive)."""
    return queue_service.lookup_by_code(db, code, clock)
