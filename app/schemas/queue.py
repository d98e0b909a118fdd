from typing import Optional
from pydantic import BaseModel, Field, UUID4
from datetime import datetime

from app.models.queue_entry import QueueStatus


# Queue: Join (POST /queue)
class QueueEntryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., pattern=r"^\d{10,11}$")   # digits only
    party_size: int = Field(..., ge=1, le=20)


# Queue entry with its derived position (0 when not waiting)
class QueueEntry(BaseModel):
    id: UUID4
    code: str
    name: str
    phone: str
    party_size: int
    status: QueueStatus
    position: int = 0
    people_ahead: int = 0
    called_at: Optional[datetime] = None
    seated_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Public status lookup (GET /queue/status/{code})
class QueuePosition(BaseModel):
    code: str
    name: str
    position: int
    people_ahead: int
    status: QueueStatus
    estimated_wait_minutes: Optional[int] = None
    message: str


class QueueStats(BaseModel):
    waiting: int
    called: int
    seated: int
    no_show: int
    cancelled: int
    expired: int


class QueueClearResponse(BaseModel):
    count: int
    message: str
