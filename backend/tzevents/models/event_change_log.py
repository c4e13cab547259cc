"""EventChangeLog ORM model: field-level audit trail owned by an event."""
import uuid
from sqlalchemy import Column, String, Integer, JSON, ForeignKey
from sqlalchemy.orm import relationship

from tzevents.database import Base, UTCDateTime


class EventChangeLog(Base):
    __tablename__ = "event_change_logs"

    log_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)  # append order
    field = Column(String(32), nullable=False)
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    updated_at = Column(UTCDateTime, nullable=False)
    updated_by = Column(String(36), ForeignKey("profiles.profile_id"), nullable=True)

    event = relationship("Event", back_populates="update_logs")
