from app.models.user import User
from app.models.booking import Booking, BookingStatus, Environment
from app.models.blocked_slot import BlockedSlot
from app.models.queue_entry import QueueEntry, QueueStatus
