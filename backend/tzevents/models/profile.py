"""Profile ORM model."""
import uuid
from sqlalchemy import Column, String, Boolean

from tzevents.database import Base, UTCDateTime, utcnow


class Profile(Base):
    __tablename__ = "profiles"

    profile_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, index=True)
    timezone = Column(String(64), nullable=False, default="UTC", index=True)  # IANA tz
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)
