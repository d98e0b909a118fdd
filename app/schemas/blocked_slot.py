from typing import Optional
from pydantic import BaseModel, Field, UUID4
import datetime as dt

from app.models.booking import Environment
from app.schemas.booking import TIME_SLOT_PATTERN


# Blocked slot: Create (POST /admin/blocked-slots)
class BlockedSlotCreate(BaseModel):
    date: dt.date
    time_slot: str = Field(..., pattern=TIME_SLOT_PATTERN)
    environment: Optional[Environment] = None   # omit to block both areas
    reason: Optional[str] = Field(None, max_length=255)


# Blocked slot: DB response
class BlockedSlot(BaseModel):
    id: UUID4
    date: dt.date
    time_slot: str
    environment: Optional[Environment] = None
    reason: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class UnblockDayResponse(BaseModel):
    removed: int
