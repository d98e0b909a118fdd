from uuid import UUID
from typing import List, Optional
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.api.deps import get_current_admin_user, get_current_staff_user
from app.core.clock import Clock, get_clock
from app.models.user import User
from app.models.booking import Environment
from app.schemas.blocked_slot import BlockedSlot as BlockedSlotSchema, BlockedSlotCreate, UnblockDayResponse
from app.schemas.common import ErrorResponse, ListResponse
from app.services import blocked_slots as block_service

router = APIRouter(prefix="/admin/blocked-slots", tags=["Admin - Blocked Slots"])


# ---------------------------------------------------------------------------
# Reads (admin + supervisor)
# ---------------------------------------------------------------------------


@router.get("/", response_model=ListResponse[BlockedSlotSchema])
def list_blocked_slots(
    date: Optional[date] = Query(None, description="Filter by date (YYYY-MM-DD)"),
    environment: Optional[Environment] = Query(None, description="Filter by seating area"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    blocks, total = block_service.list_blocks(db, day=date, environment=environment)
    return ListResponse(data=[BlockedSlotSchema.model_validate(b) for b in blocks], total=total)


@router.get("/by-date/{day}", response_model=List[BlockedSlotSchema])
def list_blocked_slots_for_date(
    day: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    return block_service.blocks_for_date(db, day)


# ---------------------------------------------------------------------------
# Whole-day operations (admin). Declared before /{block_id} routes.
# ---------------------------------------------------------------------------


@router.post(
    "/block-day",
    response_model=List[BlockedSlotSchema],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def block_entire_day(
    date: date = Query(..., description="Date to block (YYYY-MM-DD)"),
    environment: Optional[Environment] = Query(None, description="Omit to block both areas"),
    reason: Optional[str] = Query(None, max_length=255),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_admin_user),
):
    """
    Block every time slot of a day. Slots already blocked for the same area
    are skipped; only the newly created blocks are returned.
    """
    return block_service.block_entire_day(db, date, clock, environment=environment, reason=reason)


@router.delete("/unblock-day", response_model=UnblockDayResponse)
def unblock_entire_day(
    date: date = Query(..., description="Date to unblock (YYYY-MM-DD)"),
    environment: Optional[Environment] = Query(None, description="Only remove this area's blocks"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    removed = block_service.unblock_entire_day(db, date, environment=environment)
    return UnblockDayResponse(removed=removed)


# ---------------------------------------------------------------------------
# Single blocks
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=BlockedSlotSchema,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_blocked_slot(
    data: BlockedSlotCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_admin_user),
):
    return block_service.create_block(
        db, data.date, data.time_slot, clock, environment=data.environment, reason=data.reason,
    )


@router.get("/{block_id}", response_model=BlockedSlotSchema, responses={404: {"model": ErrorResponse}})
def get_blocked_slot(
    block_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user),
):
    return block_service.get_block(db, block_id)


@router.delete(
    "/{block_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
def delete_blocked_slot(
    block_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user),
):
    block_service.remove_block(db, block_id)
