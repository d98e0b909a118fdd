import uuid
from sqlalchemy import Column, String, DateTime, func, Text, Date, Index, UniqueConstraint, Enum as SAEnum, text
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base
from app.models.booking import Environment


_WHOLE_SLOT = text("environment IS NULL")


class BlockedSlot(Base):
    __tablename__ = "blocked_slots"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(5), nullable=False)
    environment = Column(SAEnum(Environment, native_enum=False, length=10), nullable=True)  # NULL = both
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("date", "time_slot", "environment", name="uq_blocked_slots_slot_env"),
        # NULLs never collide in a plain unique constraint
        Index(
            "uq_blocked_slots_slot_any_env",
            "date",
            "time_slot",
            unique=True,
            postgresql_where=_WHOLE_SLOT,
            sqlite_where=_WHOLE_SLOT,
        ),
    )
