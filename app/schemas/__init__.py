from app.schemas.common import PaginatedResponse, ListResponse, ErrorResponse, QueueConflictResponse, HealthResponse
from app.schemas.user import User, StaffCreate, Token
from app.schemas.booking import (
    Booking, BookingCreate, BookingUpdate, BookingStatusUpdate,
    TimeSlotAvailability, AvailabilityResponse,
)
from app.schemas.blocked_slot import BlockedSlot, BlockedSlotCreate, UnblockDayResponse
from app.schemas.queue import QueueEntry, QueueEntryCreate, QueuePosition, QueueStats, QueueClearResponse
