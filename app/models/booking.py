import uuid
import enum
from sqlalchemy import Column, String, DateTime, func, Integer, Text, Date, Index, Enum as SAEnum, text
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"        # reserved; the public flow writes CONFIRMED directly
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Environment(str, enum.Enum):
    INDOOR = "INDOOR"
    OUTDOOR = "OUTDOOR"


# Partial index predicate shared by both dialects
_ACTIVE_BOOKING = text("status <> 'CANCELLED'")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(5), nullable=False)          # "HH:MM"
    environment = Column(SAEnum(Environment, native_enum=False, length=10), nullable=False)
    guests = Column(Integer, nullable=False)
    observations = Column(Text, nullable=True)
    status = Column(
        SAEnum(BookingStatus, native_enum=False, length=10),
        nullable=False,
        default=BookingStatus.CONFIRMED,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # At most one non-cancelled booking per (date, slot, environment).
        # This index, not the availability pre-check, is the final arbiter.
        Index(
            "uq_bookings_active_slot",
            "date",
            "time_slot",
            "environment",
            unique=True,
            postgresql_where=_ACTIVE_BOOKING,
            sqlite_where=_ACTIVE_BOOKING,
        ),
    )
