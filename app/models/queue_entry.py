import uuid
import enum
from sqlalchemy import Column, String, Date, DateTime, Integer, Index, Enum as SAEnum, text
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base


class QueueStatus(str, enum.Enum):
    WAITING = "WAITING"
    CALLED = "CALLED"
    SEATED = "SEATED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    EXPIRED = "EXPIRED"


_WAITING = text("status = 'WAITING'")


class QueueEntry(Base):
    __tablename__ = "queue_entries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(6), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    party_size = Column(Integer, nullable=False)
    status = Column(
        SAEnum(QueueStatus, native_enum=False, length=10),
        nullable=False,
        default=QueueStatus.WAITING,
        index=True,
    )
    called_at = Column(DateTime, nullable=True)
    seated_at = Column(DateTime, nullable=True)
    # Local wall-clock time from the injected clock; the queue day is a local day
    created_at = Column(DateTime, nullable=False, index=True)
    queue_day = Column(Date, nullable=False)   # clock.today() at join time

    __table_args__ = (
        Index("ix_queue_entries_status_created", "status", "created_at"),
        # One waiting entry per phone per day; concurrent joins are decided here
        Index(
            "uq_queue_entries_waiting_phone_day",
            "phone",
            "queue_day",
            unique=True,
            postgresql_where=_WAITING,
            sqlite_where=_WAITING,
        ),
    )
