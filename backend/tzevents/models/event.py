"""Event ORM model and its ordered profile assignments."""
import uuid
from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from tzevents.database import Base, UTCDateTime, utcnow


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        # Standing invariant: no write may leave an event ending at or before its start.
        CheckConstraint("end_date_time > start_date_time", name="end_after_start"),
        Index("ix_events_start_end", "start_date_time", "end_date_time"),
    )

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    timezone = Column(String(64), nullable=False, default="UTC", index=True)
    start_date_time = Column(UTCDateTime, nullable=False)
    end_date_time = Column(UTCDateTime, nullable=False)
    created_by = Column(String(36), ForeignKey("profiles.profile_id"), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    profile_links = relationship(
        "EventProfile",
        back_populates="event",
        order_by="EventProfile.position",
        cascade="all, delete-orphan",
    )
    update_logs = relationship(
        "EventChangeLog",
        back_populates="event",
        # Concurrent writers may reuse a position; fall back to time, then id.
        order_by="[EventChangeLog.position, EventChangeLog.updated_at, EventChangeLog.log_id]",
        cascade="all, delete-orphan",
    )

    @property
    def profile_ids(self) -> list[str]:
        return [link.profile_id for link in self.profile_links]


class EventProfile(Base):
    """One slot in an event's profile list. Duplicates are allowed."""

    __tablename__ = "event_profiles"
    __table_args__ = (Index("ix_event_profiles_profile_event", "profile_id", "event_id"),)

    link_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False)
    profile_id = Column(String(36), ForeignKey("profiles.profile_id"), nullable=False)
    position = Column(Integer, nullable=False)

    event = relationship("Event", back_populates="profile_links")
