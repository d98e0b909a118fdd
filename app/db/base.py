from app.db.session import Base
from app.models.user import User
from app.models.booking import Booking
from app.models.blocked_slot import BlockedSlot
from app.models.queue_entry import QueueEntry
